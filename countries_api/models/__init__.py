"""
Modèles SQLAlchemy / SQLAlchemy models.
Importer tous les modèles ici pour qu'ils soient enregistrés sur Base.metadata.
Import all models here so they are registered on Base.metadata.
"""

from countries_api.models.country import Country

__all__ = [
    "Country",
]
