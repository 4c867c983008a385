"""
Boundary layer data model(s).

These objects can be used to communicate with the Service.
Both the API layer (higher) and domain/db layers (lower) use the model(s) defined here to send to/receive from the Service
(Decouples the data model specific to the DB layer, API layer, or domain layer from the information needed to send across boundaries)
"""

from dataclasses import dataclass, field


@dataclass
class GameModel:
    """Transport-safe representation of a chess game used between API, Service, DB, and Game layers.

    The game is restored by replaying `moves_uci` from `start_fen`. `current_fen`, `history` and `status` are
    derived data, stored so readers do not need to replay anything.
    """

    start_fen: str
    current_fen: str
    moves_uci: list[str] = field(default_factory=list)
    history: list[str] = field(default_factory=list)
    status: str = "playing"
    difficulty: str = "medium"
