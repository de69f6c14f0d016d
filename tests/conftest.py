import pytest


def drawn_cube_moves():
    """Alternating moves that fill a 4x4x4 cube without completing any line.

    Cell (x, y, z) goes to player two when g(x) ^ h(y) ^ k(z) is set, with
    g = x in {1, 2}, h = y >= 2, k = z == 3. Every catalog line sees both
    values of that xor, and each player gets exactly 32 cells.
    """
    ones, twos = [], []
    for x in range(4):
        for y in range(4):
            for z in range(4):
                bit = (x in (1, 2)) ^ (y >= 2) ^ (z == 3)
                (twos if bit else ones).append((x, y, z))
    return [m for pair in zip(ones, twos) for m in pair]


@pytest.fixture
def draw_moves():
    return drawn_cube_moves()


@pytest.fixture
def scenario_moves():
    # player one completes the x-line on y=0, z=0 with the fifth move
    return [(0, 0, 0), (1, 1, 0), (1, 0, 0), (1, 2, 0), (2, 0, 0)]
