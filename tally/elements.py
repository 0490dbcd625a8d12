from abc import ABC, abstractmethod
from collections.abc import Mapping
import math

from .hooks import CONTEXT


INCOMPATIBLE = 0
COMPATIBLE = 1
EQUIVALENT = 2


def _is_dirty(ctx):
    path = tuple(ctx.path)
    return any(dirty[:len(path)] == path for dirty in ctx.dirty)


def _int_text(value):
    sign = '-' if value < 0 else ''
    value = abs(value)

    exponent = int(math.log10(value))
    scaled = value // 10 ** (exponent - 16)
    while scaled >= 10 ** 17:
        exponent += 1
        scaled = value // 10 ** (exponent - 16)
    while scaled < 10 ** 16:
        exponent -= 1
        scaled = value // 10 ** (exponent - 16)

    mantissa = scaled / 10 ** 16
    if mantissa >= 10:
        mantissa /= 10
        exponent += 1
    return f'{sign}{mantissa!r}e+{exponent}'


def _text(value):
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, str):
        return value
    try:
        return str(value)
    except ValueError:
        # ints beyond the interpreter's digit limit for str()
        if not isinstance(value, int):
            raise
        return _int_text(value)


def render_child(elem, prev_elem, prev_state, prev_result):
    ctx = CONTEXT.get()

    if isinstance(elem, Element):
        comp = elem._comp(prev_elem)
    else:
        comp = INCOMPATIBLE

    if comp == EQUIVALENT and not _is_dirty(ctx):
        return prev_state, prev_result

    if comp == INCOMPATIBLE:
        if isinstance(prev_elem, Element):
            prev_elem._unmount(prev_state, prev_result)
        if not isinstance(elem, Element):
            return None, _text(elem)
        prev_state, prev_result = elem._init()

    return elem._render(prev_state, prev_result)


class Element(ABC):

    def __init__(self, props, children):
        self._props = props
        self._children = children

    @abstractmethod
    def _copy(self, props, children):
        raise NotImplementedError

    @abstractmethod
    def _comp(self, elem):
        raise NotImplementedError

    @abstractmethod
    def _init(self):
        raise NotImplementedError

    @abstractmethod
    def _render(self, prev_state, prev_result):
        raise NotImplementedError

    @abstractmethod
    def _unmount(self, state, result):
        raise NotImplementedError

    def __call__(self, *args, **kwargs):
        props = dict(self._props)
        children = list(self._children)

        for arg in args:
            if isinstance(arg, Mapping):
                props.update(arg)
            else:
                children.append(arg)
        props.update(kwargs)

        if 'children' in props:
            raise ValueError('\'children\' is not allowed as a property name')

        return self._copy(props, tuple(children))


class HTMLElement(Element):

    def __init__(self, tag, props, children):
        if tag is None and props:
            raise ValueError('fragment cannot have props')

        super().__init__(props, children)
        self._tag = tag

    def _copy(self, props, children):
        return HTMLElement(self._tag, props, children)

    def __eq__(self, other):
        return (
            isinstance(other, HTMLElement) and
            other._tag == self._tag and
            other._props == self._props and
            other._children == self._children
        )

    def __repr__(self):
        return f'<{self._tag or "fragment"}>'

    def _comp(self, elem):
        if elem == self:
            return EQUIVALENT
        elif isinstance(elem, HTMLElement) and elem._tag == self._tag:
            return COMPATIBLE
        else:
            return INCOMPATIBLE

    def _init(self):
        return (), (self._tag, self._props)

    def _render(self, prev_state, prev_result):
        ctx = CONTEXT.get()

        state = []
        child_results = []

        for i, child in enumerate(self._children):
            if i < len(prev_state):
                prev_child, prev_child_state = prev_state[i]
                prev_child_result = prev_result[i + 2]
            else:
                prev_child = None
                prev_child_state = None
                prev_child_result = None

            ctx.path.append(i)
            try:
                child_state, child_result = render_child(
                    child, prev_child, prev_child_state, prev_child_result,
                )
            finally:
                ctx.path.pop()

            state.append((child, child_state))
            child_results.append(child_result)

        for (prev_child, prev_child_state), prev_child_result in zip(
            prev_state[len(self._children):],
            prev_result[len(self._children) + 2:],
        ):
            if isinstance(prev_child, Element):
                prev_child._unmount(prev_child_state, prev_child_result)

        return tuple(state), (self._tag, self._props, *child_results)

    def _unmount(self, state, result):
        for (child, child_state), child_result in zip(state, result[2:]):
            if isinstance(child, Element):
                child._unmount(child_state, child_result)


class Component(Element):

    def __init__(self, func, props, children):
        super().__init__(props, children)
        self._func = func

    def _copy(self, props, children):
        return Component(self._func, props, children)

    def __eq__(self, other):
        return (
            isinstance(other, Component) and
            other._func == self._func and
            other._props == self._props and
            other._children == self._children
        )

    def __repr__(self):
        return f'<{self._func.__name__}>'

    def _comp(self, elem):
        if elem == self:
            return EQUIVALENT
        elif isinstance(elem, Component) and elem._func == self._func:
            return COMPATIBLE
        else:
            return INCOMPATIBLE

    def _init(self):
        return (None, None, None), None

    def _render(self, prev_state, prev_result):
        ctx = CONTEXT.get()
        refs, prev_elem, prev_elem_state = prev_state

        ctx.refs = [] if refs is None else iter(refs)
        try:
            props = self._props
            if self._children:
                props = {**props, 'children': self._children}
            elem = self._func(**props)

            if refs is None:
                refs = tuple(ctx.refs)
            else:
                try:
                    next(ctx.refs)
                except StopIteration:
                    pass
                else:
                    raise ValueError('less refs used than previous render')
        finally:
            del ctx.refs

        ctx.path.append('render')
        try:
            elem_state, result = render_child(
                elem, prev_elem, prev_elem_state, prev_result,
            )
        finally:
            ctx.path.pop()

        return (refs, elem, elem_state), result

    def _unmount(self, state, result):
        refs, elem, elem_state = state
        if isinstance(elem, Element):
            elem._unmount(elem_state, result)
        for ref in refs or ():
            if hasattr(ref, '_cleanup'):
                ref._cleanup()


class HTMLFactory:

    def __getattr__(self, name):
        return HTMLElement(name, {}, ())


h = HTMLFactory()


def component(func):
    return Component(func, {}, ())


fragment = HTMLElement(None, {}, ())
