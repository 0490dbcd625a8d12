import logging
from types import SimpleNamespace

from .elements import Element, render_child
from .hooks import CONTEXT
from .node import Node


logger = logging.getLogger(__name__)


class Root:

    def __init__(self, document):
        self._document = document
        self._elem = None
        self._state = None
        self._result = None
        self._dirty = set()
        self._mounted = True

    @property
    def result(self):
        return self._result

    def _rerender_path(self, path):
        if not self._mounted:
            return
        self._dirty.add(path)
        if self not in self._document._pending:
            self._document._pending.append(self)

    def _run(self, elem, dirty):
        ctx = SimpleNamespace(
            path=[],
            dirty=dirty,
            rerender_path=self._rerender_path,
        )
        token = CONTEXT.set(ctx)
        try:
            self._state, self._result = render_child(
                elem, self._elem, self._state, self._result,
            )
        finally:
            CONTEXT.reset(token)
        self._elem = elem

    def render(self, elem):
        self._run(elem, set())

    def flush(self):
        dirty = self._dirty
        self._dirty = set()
        if dirty and self._mounted:
            self._run(self._elem, dirty)

    def unmount(self):
        self._mounted = False
        if isinstance(self._elem, Element):
            self._elem._unmount(self._state, self._result)
        self._elem = None
        self._state = None
        self._result = None


class Container:

    def __init__(self, document, id):
        self.document = document
        self.id = id

    def __repr__(self):
        return f'<Container #{self.id}>'


class Document:

    def __init__(self, markup):
        self._pending = []
        self._roots = {}
        self._host = Root(self)
        self._host.render(markup)

    def _compose(self, node):
        if not isinstance(node, tuple):
            return node

        tag, props, *children = node

        if tag is not None and props.get('id') in self._roots:
            return (tag, props, self._roots[props['id']].result)

        composed = tuple(map(self._compose, children))
        if all(a is b for a, b in zip(composed, children)):
            return node
        return (tag, props, *composed)

    @property
    def result(self):
        return (None, {}, self._compose(self._host.result))

    def get_element_by_id(self, id):
        host = Node((), (None, {}, self._host.result))
        for node in host.children(deep=True):
            if node.type == 'element' and node.get('id') == id:
                return Container(self, id)
        return None

    def _mount(self, id, elem):
        try:
            root = self._roots[id]
        except KeyError:
            logger.debug(f'Mounting {elem!r} into #{id}')
            root = Root(self)
            self._roots[id] = root
        else:
            logger.debug(f'Rendering {elem!r} into already mounted #{id}')
        root.render(elem)

    def unmount(self, container):
        try:
            root = self._roots.pop(container.id)
        except KeyError:
            return False
        logger.debug(f'Unmounting #{container.id}')
        root.unmount()
        return True

    def close(self):
        for root in self._roots.values():
            root.unmount()
        self._roots.clear()
        self._host.unmount()
        self._pending.clear()

    def flush(self):
        while self._pending:
            root = self._pending.pop(0)
            root.flush()

    def dispatch(self, path, event_type, details=None):
        """
        Calls the `on<event_type>` handlers of the node at `path` and its
        ancestors, then renders the updates they requested.

        Returns `False` when no node exists at `path`.
        """
        if details is None:
            details = {}

        try:
            target = Node.from_path(self.result, path)
        except IndexError:
            logger.debug(
                f'Ignoring {event_type} event for missing node {tuple(path)}'
            )
            return False

        current_target = target
        while current_target is not None:
            if current_target.type == 'element':
                callback = current_target.get(f'on{event_type}')
                if callable(callback):
                    callback(SimpleNamespace(
                        type=event_type,
                        target=target,
                        current_target=current_target,
                        **details,
                    ))
            current_target = current_target.parent

        self.flush()
        return True


def render(elem, container):
    if container is None:
        logger.debug(f'No container to mount {elem!r} into, skipping')
        return
    container.document._mount(container.id, elem)
