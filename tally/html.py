import html


class SafeText:

    __slots__ = ['text']

    def __init__(self, text):
        self.text = text

    def __bool__(self):
        return bool(self.text)

    def __eq__(self, other):
        return isinstance(other, SafeText) and other.text == self.text

    def __hash__(self):
        return hash((SafeText, self.text))

    def __repr__(self):
        return f'SafeText({self.text!r})'


def is_text(node):
    return isinstance(node, (str, SafeText))


def _inline(nodes):
    for node in nodes:
        if node is None:
            continue
        if isinstance(node, tuple) and node[0] is None:
            yield from _inline(node[2:])
        else:
            yield node


def html_flatten(nodes):
    text = None

    for node in _inline(nodes):
        if isinstance(node, str):
            text = node if text is None else text + node
            continue

        if text:
            yield text
        text = None
        yield node

    if text:
        yield text


def html_children(node):
    return html_flatten(node[2:])


def clean_value(value):
    if callable(value):
        return 'call(event)'
    return value


def clean_node(node):
    if isinstance(node, SafeText):
        return node.text
    if not isinstance(node, tuple):
        return node

    tag, props, *_ = node

    cleaned_props = {}
    for key, value in props.items():
        value = clean_value(value)
        if value is False:
            continue
        if value is True:
            value = ''
        if not isinstance(value, str):
            value = str(value)
        cleaned_props[key] = value

    return [tag, cleaned_props, *map(clean_node, html_children(node))]


def html_parts(node):
    for node in html_flatten((node,)):
        if isinstance(node, SafeText):
            yield node.text
            continue

        if isinstance(node, str):
            yield html.escape(node, quote=False)
            continue

        tag, props, *_ = node

        yield '<'
        yield tag
        for key, value in props.items():
            value = clean_value(value)
            if value is False:
                continue
            yield ' '
            yield key
            if value is True:
                continue
            yield '="'
            yield html.escape(str(value))
            yield '"'
        yield '>'

        for child in html_children(node):
            yield from html_parts(child)

        yield '</'
        yield tag
        yield '>'


def html_diff(old_node, new_node, path=()):
    old_children = list(html_children(old_node))
    new_children = list(html_children(new_node))

    for index, (old_child, new_child) in enumerate(
        zip(old_children, new_children)
    ):
        if old_child is new_child:
            continue

        if (
            isinstance(old_child, tuple) and
            isinstance(new_child, tuple) and
            old_child[0] == new_child[0]
        ):
            old_props = old_child[1]
            new_props = new_child[1]

            for key in old_props:
                if key not in new_props:
                    yield ('unset', *path, index, key)

            for key, value in new_props.items():
                value = clean_value(value)
                if (
                    key in old_props and
                    clean_value(old_props[key]) == value
                ):
                    continue
                if value is False:
                    yield ('unset', *path, index, key)
                    continue
                if value is True:
                    value = ''
                yield ('set', *path, index, key, str(value))

            yield from html_diff(old_child, new_child, (*path, index))

        elif old_child != new_child:
            yield ('replace', *path, index, clean_node(new_child))

    for index in reversed(range(len(new_children), len(old_children))):
        yield ('remove', *path, index)

    for index in range(len(old_children), len(new_children)):
        yield ('insert', *path, index, clean_node(new_children[index]))
