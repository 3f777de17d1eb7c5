"""ParcInfo - inventory and access management for establishments, users and PCs"""

__version__ = "1.0.0"
