"""PlayTak TEI - Bridge between the PlayTak server and a TEI engine.

A thin async relay that:
- Logs in to PlayTak and lists, accepts or posts a seek
- Launches a TEI engine as a subprocess and configures it for the game
- Relays moves between the server (wire notation) and the engine (PTN)
"""

__version__ = "0.1.0"
