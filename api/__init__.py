"""
api - FastAPI backend for the Epitome database.

Provides RESTful API endpoints for:
- Items, enchantments, mobs and class pages
- Build planner, builds and votes
- Guides
- Trade market and comments
- Interactive map markers
- Admin back-office
"""

__version__ = "1.0.0"
