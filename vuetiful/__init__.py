"""vuetiful - Vuetify utility-class extraction and indexing."""

__version__ = "0.3.0"
