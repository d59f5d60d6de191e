import argparse
import logging
import os
import sys
from datetime import datetime

import pygame
from moviepy import ImageSequenceClip

from partyfx.ambient import COLOR_THEMES, DomParticleSystem
from partyfx.burst import CanvasParticleSystem
from partyfx.config import BACKGROUND, FRAMERATE, HEIGHT, PIXEL_RATIO, WIDTH, ConfigError, merge_burst_config
from partyfx.page import Page, Viewport
from partyfx.scheduler import FrameScheduler


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Throw a confetti party in a pygame window.")
    parser.add_argument("--width", type=int, default=WIDTH, help="Window width in px")
    parser.add_argument("--height", type=int, default=HEIGHT, help="Window height in px")
    parser.add_argument("--pixel-ratio", type=float, default=PIXEL_RATIO, help="Canvas pixels per window pixel")
    parser.add_argument("--count", type=int, help="Burst confetti count (split across both edges)")
    parser.add_argument("--radius", type=float, help="Burst confetti radius in px")
    parser.add_argument("--emoji", action="append", dest="emojis", help="Emoji to throw instead of shapes (repeatable)")
    parser.add_argument("--icon", help="Image path or URL to throw instead of shapes")
    parser.add_argument("--theme", type=int, default=0, choices=range(len(COLOR_THEMES)), help="Ambient color theme")
    parser.add_argument("--ambient-limit", type=int, help="Stop the ambient shower after this many confetti")
    parser.add_argument("--record", action="store_true", help="Save the session as an MP4 in vid/")
    parser.add_argument("--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def burst_config(args):
    config = {}
    if args.count is not None:
        config["count"] = args.count
    if args.radius is not None:
        config["radius"] = args.radius
    if args.emojis:
        config["emojis"] = args.emojis
    if args.icon:
        config["icon"] = args.icon
    # Fail before the window opens
    merge_burst_config(config)
    return config


def save_recording(frames):
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    output_folder = os.path.join(os.path.dirname(os.path.abspath(__file__)), "vid")
    os.makedirs(output_folder, exist_ok=True)
    filename = os.path.join(output_folder, f"confetti_party_{timestamp}.mp4")

    video_clip = ImageSequenceClip(frames, fps=FRAMERATE)
    video_clip.write_videofile(filename, codec="libx264")
    print(f"Recording saved as {filename}")


def draw_greeting(screen, font, viewport):
    text = font.render("Happy Birthday!", True, (255, 230, 120))
    screen.blit(text, (viewport.width // 2 - text.get_width() // 2, viewport.height // 3))


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        config = burst_config(args)
    except ConfigError as e:
        print(f"Invalid confetti options: {e}")
        return 2

    pygame.init()
    # Recorded frames must all share one size
    flags = 0 if args.record else pygame.RESIZABLE
    screen = pygame.display.set_mode((args.width, args.height), flags)
    pygame.display.set_caption("Confetti Party")
    clock = pygame.time.Clock()
    font = pygame.font.SysFont("Arial", 56)

    scheduler = FrameScheduler()
    page = Page(Viewport(args.width, args.height, args.pixel_ratio))
    burst = CanvasParticleSystem(page, scheduler)
    ambient = DomParticleSystem(page, scheduler, theme=args.theme, max_particles=args.ambient_limit)

    celebrating = False
    recording_frames = []
    print("Press space or click to celebrate, r to re-fire, s to stop the shower, esc to quit.")

    running = True
    while running:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                running = False
            elif event.type == pygame.VIDEORESIZE:
                page.resize(event.w, event.h)
            elif event.type == pygame.MOUSEBUTTONDOWN or (event.type == pygame.KEYDOWN and event.key == pygame.K_SPACE):
                celebrating = True
                burst.spawn(config)
                ambient.start()
            elif event.type == pygame.KEYDOWN:
                if event.key == pygame.K_ESCAPE:
                    running = False
                elif event.key == pygame.K_r:
                    burst.reset(config)
                elif event.key == pygame.K_s:
                    ambient.stop_spawning()

        scheduler.tick()

        screen.fill(BACKGROUND)
        if celebrating:
            draw_greeting(screen, font, page.viewport)
        page.render(screen)
        pygame.display.flip()

        if args.record:
            frame = pygame.surfarray.array3d(screen)
            recording_frames.append(frame.swapaxes(0, 1))  # (height, width, channels)

        clock.tick(FRAMERATE)

    pygame.quit()

    if args.record and recording_frames:
        save_recording(recording_frames)
    return 0


if __name__ == '__main__':
    sys.exit(main())
