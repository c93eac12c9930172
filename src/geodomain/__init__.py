"""GeoDomain: a marketplace for geographically scoped domain names."""

__version__ = "0.1.0"
