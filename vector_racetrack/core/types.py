from typing import Literal

StrategyName = Literal[
    "do_not_move",
    "user",
    "move_list",
    "path_follower",
    "path_finder",
]

CrashReason = Literal["car collision", "wall collision"]

CarId = str
