# renderer.py

import numpy as np
import pygame

import constants
from controls import SYMBOLS, UNITS, VARIABLES


def world_to_screen(points: np.ndarray, screen_size: tuple, pixels_per_unit: float = constants.PIXELS_PER_UNIT) -> np.ndarray:
    """
    Maps world coordinates (origin at the container centre, y up) to pixel
    coordinates (origin top-left, y down). Accepts shape (2,) or (N, 2).
    """
    points = np.asarray(points, dtype=float)
    center = np.array(screen_size, dtype=float) / 2
    screen = points * pixels_per_unit
    screen[..., 1] *= -1
    return screen + center


def interpolate_color(norm_value: float):
    """
    Calculates a smooth color by linearly interpolating between keyframes.
    """
    norm_value = min(max(norm_value, 0.0), 1.0)
    for i in range(len(constants.COLOR_GRADIENT_KEYFRAMES) - 1):
        pos1, color1 = constants.COLOR_GRADIENT_KEYFRAMES[i]
        pos2, color2 = constants.COLOR_GRADIENT_KEYFRAMES[i+1]

        if pos1 <= norm_value <= pos2:
            local_t = (norm_value - pos1) / (pos2 - pos1)
            r = int(color1[0] * (1 - local_t) + color2[0] * local_t)
            g = int(color1[1] * (1 - local_t) + color2[1] * local_t)
            b = int(color1[2] * (1 - local_t) + color2[2] * local_t)
            return (r, g, b)

    return constants.COLOR_GRADIENT_KEYFRAMES[-1][1]


def draw_walls(screen: pygame.Surface, half_size: float):
    thick = constants.DRAWN_WALL_THICKNESS
    ppu = constants.PIXELS_PER_UNIT
    size = screen.get_size()
    outer = half_size + thick
    # Four bars around the square, given as (left, top) world corners and extents
    bars = [
        ((-outer, -half_size), (2 * outer, thick)),
        ((-outer, outer), (2 * outer, thick)),
        ((-outer, outer), (thick, 2 * outer)),
        ((half_size, outer), (thick, 2 * outer)),
    ]
    for corner, (width, height) in bars:
        x, y = world_to_screen(np.array(corner), size)
        pygame.draw.rect(screen, constants.WHITE, pygame.Rect(int(x), int(y), max(1, int(width * ppu)), max(1, int(height * ppu))))


def draw_particles(screen: pygame.Surface, positions: np.ndarray, velocities: np.ndarray, radius: float):
    """Particles are colored by v^2 against the top of the temperature slider."""
    if len(positions) == 0:
        return
    size = screen.get_size()
    pixels = world_to_screen(positions, size)
    energies = np.nan_to_num(np.sum(velocities ** 2, axis=1), nan=0.0, posinf=constants.COLOR_MAX_ENERGY)
    normalized = np.clip(energies / constants.COLOR_MAX_ENERGY, 0, 1)
    draw_radius = max(1, int((radius + constants.PARTICLE_DRAW_PADDING) * constants.PIXELS_PER_UNIT))
    for i in range(len(positions)):
        pygame.draw.circle(
            screen,
            interpolate_color(normalized[i]),
            (int(pixels[i, 0]), int(pixels[i, 1])),
            draw_radius
        )


def draw_panel(screen: pygame.Surface, font: pygame.font.Font, panel, particle_count: int):
    """Equation readout, mode label and key help along the left edge."""
    x, y = 10, 10
    line_height = font.get_linesize() + 4
    for variable in VARIABLES:
        if not panel.is_editable(variable):
            color = (120, 120, 120)
        elif variable in panel.pending:
            color = constants.PENDING_COLOR
        else:
            color = constants.WHITE
        marker = '>' if panel.selected == variable else ' '
        text = f"{marker} {SYMBOLS[variable]} = {panel.display_text(variable)} {UNITS[variable]}"
        screen.blit(font.render(text, True, color), (x, y))
        y += line_height

    y += line_height // 2
    lines = [
        f"[{panel.mode_label}]  particles: {particle_count}",
        "P/V/N/T select, Up/Down adjust, type + Enter",
        "Tab: constraint mode   S: set to STP   Esc: quit",
    ]
    if panel.last_error is not None:
        lines.append(f"! {panel.last_error}")
    for line in lines:
        screen.blit(font.render(line, True, constants.WHITE), (x, y))
        y += line_height
