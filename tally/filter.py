from functools import partial
from itertools import chain
import json
import re


WORD = r'[A-Za-z_-][A-Za-z0-9_-]*'
VALUE = r'"(?:[^"\\]|\\.)*"|-?\d+(?:\.\d+)?|true|false|null'

TOKEN_RE = re.compile(rf'''
    (?P<space>\s*)
    (?:
        (?P<comma>,)
      | (?P<child>>)
      | (?P<star>\*)
      | (?P<tag>{WORD})
      | \#(?P<id>{WORD})
      | \.(?P<class>{WORD})
      | \[(?P<key>{WORD})(?:=(?P<value>{VALUE}))?\]
      | :(?P<selector>{WORD})(?:\((?P<arg>{VALUE})\))?
    )
''', re.X)

SELECTORS = {
    'eq': int,
    'text': str,
    'contains': str,
}


def _sort_nodes(nodes):
    nodes_by_path = {}
    for node in nodes:
        nodes_by_path[node.path] = node
    for path in sorted(nodes_by_path):
        yield nodes_by_path[path]


def _lazy_index(nodes, index):
    nodes = list(_sort_nodes(nodes))
    try:
        yield nodes[index]
    except IndexError:
        pass


def _check(predicate, nodes):
    if predicate[0] == 'element':
        return (node for node in nodes if node.type == 'element')

    elif predicate[0] == 'tag':
        _, tag = predicate
        return (node for node in nodes if (
            node.type == 'element' and node.tag == tag
        ))

    elif predicate[0] == 'prop':
        _, key, value = predicate
        return (node for node in nodes if (
            node.type == 'element' and
            key in node and
            node[key] == value
        ))

    elif predicate[0] == 'has_prop':
        _, key = predicate
        return (node for node in nodes if (
            node.type == 'element' and key in node
        ))

    elif predicate[0] == 'class':
        _, classname = predicate
        return (node for node in nodes if (
            node.type == 'element' and
            classname in str(node.get('class', '')).split()
        ))

    elif predicate[0] == 'selector':
        _, selector, arg = predicate

        if selector == 'eq':
            return _lazy_index(nodes, arg)

        elif selector == 'text':
            return (node for node in nodes if node.text() == arg)

        elif selector == 'contains':
            return (node for node in nodes if arg in node.text())

    raise ValueError(f'unknown predicate: {predicate[0]}')


def _children(nodes, deep):
    for node in nodes:
        if node.type != 'text':
            yield from node.children(deep=deep)


def _find(filters, nodes):
    nodes = list(nodes)
    matches = []

    for filter in filters:
        nodes_ = list(nodes)
        for predicates, deep in filter:
            nodes_ = _children(nodes_, deep)
            for predicate in predicates:
                nodes_ = predicate(nodes_)
        matches.append(nodes_)

    return _sort_nodes(chain.from_iterable(matches))


def parse_filter(filter):
    __tracebackhide__ = True

    filters = [[]]
    predicates = None
    deep = True
    index = 0

    def close_step():
        nonlocal predicates, deep
        if predicates is not None:
            filters[-1].append((tuple(predicates), deep))
        predicates = None
        deep = True

    while index < len(filter):
        match = TOKEN_RE.match(filter, index)
        if match is None:
            if filter[index:].isspace():
                break
            raise ValueError(f'{index}: unexpected character')
        index = match.end()

        if match['space'] and predicates is not None:
            close_step()

        if match['comma'] is not None:
            close_step()
            if not filters[-1]:
                raise ValueError(f'{match.start("comma")}: expected a predicate')
            filters.append([])
            continue

        if match['child'] is not None:
            if predicates is not None:
                close_step()
            if not deep:
                raise ValueError(f'{match.start("child")}: expected a predicate')
            deep = False
            continue

        if predicates is None:
            predicates = []
        elif match['star'] is not None or match['tag'] is not None:
            raise ValueError(f'{match.start()}: unexpected tag')

        if match['star'] is not None:
            predicates.append(partial(_check, ('element',)))
        elif match['tag'] is not None:
            predicates.append(partial(_check, ('tag', match['tag'])))
        elif match['id'] is not None:
            predicates.append(partial(_check, ('prop', 'id', match['id'])))
        elif match['class'] is not None:
            predicates.append(partial(_check, ('class', match['class'])))
        elif match['key'] is not None:
            if match['value'] is None:
                predicates.append(partial(_check, ('has_prop', match['key'])))
            else:
                predicates.append(partial(
                    _check, ('prop', match['key'], json.loads(match['value'])),
                ))
        else:
            selector = match['selector']
            try:
                arg_type = SELECTORS[selector]
            except KeyError:
                raise ValueError(
                    f'{match.start("selector")}: unknown selector {selector}'
                ) from None
            if match['arg'] is None:
                raise ValueError(
                    f'{match.end()}: :{selector} expects 1 argument'
                )
            arg = json.loads(match['arg'])
            if not isinstance(arg, arg_type) or isinstance(arg, bool):
                raise ValueError(
                    f'{match.start("arg")}: :{selector} expects a '
                    f'{arg_type.__name__}'
                )
            predicates.append(partial(_check, ('selector', selector, arg)))

    if predicates is None and not deep:
        raise ValueError(f'{index}: expected a predicate')
    close_step()
    if not filters[-1]:
        raise ValueError(f'{index}: expected a predicate')

    return partial(_find, tuple(map(tuple, filters)))
