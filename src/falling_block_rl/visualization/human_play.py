from __future__ import annotations

import argparse
from typing import Dict, List

import pygame

from falling_block_rl.game import Action, FallingBlockGame, GameConfig
from .renderer import Renderer


KEY_TO_ACTION: Dict[int, Action] = {
    pygame.K_LEFT: Action.LEFT,
    pygame.K_RIGHT: Action.RIGHT,
    pygame.K_UP: Action.ROTATE,
    pygame.K_DOWN: Action.SOFT_DROP,
}


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play the falling-block game")
    p.add_argument("--width", type=int, default=10)
    p.add_argument("--height", type=int, default=20)
    p.add_argument("--fall-interval", type=float, default=1.0, help="Seconds between automatic falls")
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--fps", type=int, default=60)
    return p


def run(config: GameConfig, fps: int = 60) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        # Milliseconds from pygame, seconds for the game timer
        game = FallingBlockGame(config, clock=lambda: pygame.time.get_ticks() / 1000.0)
        renderer = Renderer(cell_size=30)
        screen = pygame.display.set_mode(renderer.window_size(game))
        pygame.display.set_caption("Falling Blocks")

        running = True
        while running:
            # KEYDOWN fires once per press, so holding Up rotates only once
            actions: List[Action] = []
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_r and game.game_over:
                        game.reset()
                    else:
                        action = KEY_TO_ACTION.get(event.key)
                        if action is not None:
                            actions.append(action)

            game.update(actions)
            status = f"Score: {game.score}"
            if game.game_over:
                status += "  (R to restart, ESC to quit)"
            renderer.draw(screen, game, status)
            clock.tick(fps)
    finally:
        pygame.quit()


def main() -> None:
    args = build_parser().parse_args()
    config = GameConfig(
        width=args.width,
        height=args.height,
        random_seed=args.seed,
        fall_interval=args.fall_interval,
    )
    run(config, fps=args.fps)


if __name__ == "__main__":  # pragma: no cover
    main()
