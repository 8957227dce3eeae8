"""
OpenGames - Open Source Games Directory API

Application factory lives in opengames.app:create_app
"""

__version__ = "1.0.0"
