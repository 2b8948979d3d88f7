"""Phase package initialiser (source of truth).

Rebuild rules:
- Keep this file lightweight; do not import concrete phases here so imports of
  ``smartinject.phases`` remain side-effect free.
- Concrete phase modules (``apps``, ``binds``, ``methods``, ``handlers``,
  ``routes``) self-register when imported elsewhere (see
  ``smartinject.__init__`` for eager imports).
"""

__all__: list[str] = []
