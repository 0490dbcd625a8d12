from collections.abc import Mapping

from .filter import parse_filter
from .html import html_children, is_text


class Node(Mapping):

    def __init__(self, parents, node):
        self._parents = parents
        self._node = node

    @classmethod
    def from_path(cls, result, path):
        parents = []
        node = result
        for index in path:
            if not isinstance(node, tuple):
                raise IndexError('text nodes have no children')
            for i, child in enumerate(html_children(node)):
                if i == index:
                    break
            else:
                raise IndexError('node index out of range')
            parents.append((node, index))
            node = child
        return cls(tuple(parents), node)

    @property
    def path(self):
        return tuple(index for _, index in self._parents)

    @property
    def parent(self):
        try:
            *parents, (node, _) = self._parents
        except ValueError:
            return None
        return Node(tuple(parents), node)

    @property
    def type(self):
        if is_text(self._node):
            return 'text'
        elif isinstance(self._node, tuple):
            if self._node[0] is None:
                return 'document'
            else:
                return 'element'
        else:
            raise ValueError('unknown node type')

    @property
    def tag(self):
        if self.type != 'element':
            raise ValueError('node is not an element')
        return self._node[0]

    def __getitem__(self, key):
        if self.type != 'element':
            raise ValueError('node is not an element')
        return self._node[1][key]

    def __iter__(self):
        if self.type != 'element':
            raise ValueError('node is not an element')
        return iter(self._node[1])

    def __len__(self):
        if self.type != 'element':
            raise ValueError('node is not an element')
        return len(self._node[1])

    def __eq__(self, other):
        return (
            isinstance(other, Node) and
            other.path == self.path and
            other._node is self._node
        )

    def __hash__(self):
        return hash(self.path)

    def __repr__(self):
        if self.type == 'element':
            return f'<Node {self.tag} at {self.path}>'
        return f'<Node {self.type} at {self.path}>'

    def children(self, *, deep=False):
        if self.type not in ('element', 'document'):
            raise ValueError('node is not an element')
        for index, node in enumerate(html_children(self._node)):
            node = Node((*self._parents, (self._node, index)), node)
            yield node
            if deep and node.type == 'element':
                yield from node.children(deep=True)

    def text(self):
        if self.type == 'text':
            return self.content
        return ''.join(
            child.content
            for child in self.children(deep=True)
            if child.type == 'text'
        )

    @property
    def content(self):
        if self.type != 'text':
            raise ValueError('node is not text')
        if isinstance(self._node, str):
            return self._node
        return self._node.text

    def find(self, selector):
        return list(parse_filter(selector)([self]))
