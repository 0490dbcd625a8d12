from .app import Tally
from .document import Document, render


__all__ = ['Tally', 'Document', 'render']
