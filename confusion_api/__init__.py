"""ConFusion restaurant backend.

REST API behind the ConFusion menu web app:
- Dishes, promotions and leaders (public reads, admin writes).
- Per-dish comments owned by their author.
- Per-user favorite dishes.
- Local username/password accounts and Facebook token login, both ending in a
  stateless JWT that gates the write routes.

See README for setup and usage.
"""

__all__ = ["__version__"]

__version__ = "0.1.0"
