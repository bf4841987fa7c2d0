import random
import string
from typing import Dict, Optional

CHAR_POOL = list("ཀཁགངཅཆཇཉཏཐདནཔཕབམཙཚཛཝཞཟའཡརལཤསཧཨ")

EDGE_TOP, EDGE_RIGHT, EDGE_BOTTOM, EDGE_LEFT = range(4)

MIN_SPEED = 0.002
SPEED_RANGE = 0.003
# Spawn just outside the unit viewport
OUTSIDE_NEAR = -0.1
OUTSIDE_FAR = 1.1


def generate_enemy_id(rng: random.Random, length: int = 9) -> str:
    return ''.join(rng.choices(string.ascii_lowercase + string.digits, k=length))


def spawn_enemy(rng: Optional[random.Random] = None) -> Dict:
    """Build one target entering from a random viewport edge.

    Coordinates are normalized to [0, 1]. The velocity points inward at
    ``speed`` with a random tangential drift of up to half that speed.
    Clients replay the straight-line motion; nothing is tracked here.
    """
    rng = rng or random
    edge = rng.randrange(4)
    speed = MIN_SPEED + rng.random() * SPEED_RANGE

    if edge == EDGE_TOP:
        x, y = rng.random(), OUTSIDE_NEAR
        vx, vy = (rng.random() - 0.5) * speed, speed
    elif edge == EDGE_RIGHT:
        x, y = OUTSIDE_FAR, rng.random()
        vx, vy = -speed, (rng.random() - 0.5) * speed
    elif edge == EDGE_BOTTOM:
        x, y = rng.random(), OUTSIDE_FAR
        vx, vy = (rng.random() - 0.5) * speed, -speed
    else:
        x, y = OUTSIDE_NEAR, rng.random()
        vx, vy = speed, (rng.random() - 0.5) * speed

    return {
        'id': generate_enemy_id(rng),
        'char': rng.choice(CHAR_POOL),
        'x': x,
        'y': y,
        'vx': vx,
        'vy': vy,
    }
