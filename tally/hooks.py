from contextvars import ContextVar
from types import SimpleNamespace


CONTEXT = ContextVar('context')


def use_ref(**kwargs):
    ctx = CONTEXT.get()

    if isinstance(ctx.refs, list):
        ref = SimpleNamespace(**kwargs)
        ctx.refs.append(ref)
    else:
        try:
            ref = next(ctx.refs)
        except StopIteration:
            raise ValueError('more refs used than previous render') from None
    return ref


def use_state(initial_value=None):
    """
    Returns the current value of a state cell owned by the rendering
    component and a function to request a new value.

    The returned value is the value of this render. Requesting a new value
    does not change it, the new value is only observed by the next render.
    If the setter receives a callable it is called with the latest requested
    value instead.
    """
    ctx = CONTEXT.get()

    ref = use_ref()
    ref.path = tuple(ctx.path)
    ref.rerender_path = ctx.rerender_path

    if not hasattr(ref, 'value'):
        if callable(initial_value):
            initial_value = initial_value()

        def set_value(value):
            if callable(value):
                value = value(ref.value)

            if value is ref.value:
                return

            ref.value = value
            ref.rerender_path(ref.path)

        ref.value = initial_value
        ref.set_value = set_value

    return ref.value, ref.set_value


def use_memo(*key):
    def decorator(callback):
        ref = use_ref()
        if not hasattr(ref, 'key') or ref.key != key:
            ref.key = key
            ref.value = callback()
        return ref.value
    return decorator


def use_callback(*key):
    def decorator(callback):
        return use_memo(*key)(lambda: callback)
    return decorator
