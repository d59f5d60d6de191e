import math
import random

import pygame
import pytest

from partyfx.ambient import COLOR_THEMES, AmbientContainer, DomParticleSystem, DomSplineParticle
from partyfx.config import DEVIATION


def make_particle(width=1920):
    return DomSplineParticle(COLOR_THEMES[0], width)


def test_particle_starts_above_viewport():
    random.seed(1)
    for _ in range(50):
        particle = make_particle()
        assert particle.y == -DEVIATION
        assert 0 <= particle.x < 1920
        assert 3 <= particle.width < 12
        assert 3 <= particle.height < 12
        assert 0.13 <= particle.dy < 0.31
        assert abs(particle.dx) <= math.sin(0.1) + 1e-12
        assert math.hypot(*particle.axis) == pytest.approx(1.0)


def test_spline_is_closed():
    random.seed(2)
    particle = make_particle()
    assert len(particle.spline_y) == len(particle.spline_x)
    assert particle.spline_y[0] == particle.spline_y[-1]
    assert particle.spline_x[0] == 0.0
    assert particle.spline_x[-1] == 1.0
    assert all(0 <= radius < DEVIATION for radius in particle.spline_y)


def test_update_moves_linearly():
    random.seed(3)
    particle = make_particle()
    x, y, theta = particle.x, particle.y, particle.theta
    assert particle.update(1080, 100) is False
    assert particle.frame == 100
    assert particle.x == pytest.approx(x + particle.dx * 100)
    assert particle.y == pytest.approx(y + particle.dy * 100)
    assert particle.theta == pytest.approx(theta + particle.d_theta * 100)


def test_wobble_stays_within_deviation():
    random.seed(4)
    particle = make_particle()
    for _ in range(400):
        particle.update(100000, 37)
        offset = math.hypot(particle.left - particle.x, particle.top - particle.y)
        assert offset <= DEVIATION + 1e-9


def test_wobble_phase_wraps_over_many_periods():
    random.seed(5)
    particle = make_particle()
    particle.update(10 ** 9, 7777 * 3 + 1)
    assert not math.isnan(particle.left)
    assert not math.isnan(particle.top)


def test_update_reports_done_below_viewport():
    random.seed(6)
    particle = make_particle()
    # dy >= 0.13 px/ms carries y from -100 past 600 + 100 well within 10 s
    assert particle.update(600, 10000) is True


def test_sprite_image_follows_rendered_position():
    random.seed(7)
    particle = make_particle()
    particle.theta = 0
    particle.d_theta = 0
    particle.update(1080, 500)
    cx = particle.left + particle.width / 2
    cy = particle.top + particle.height / 2
    assert particle.rect.collidepoint(int(cx), int(cy))
    assert particle.image.get_bounding_rect().width > 0


def test_corners_keep_projected_size():
    random.seed(8)
    particle = make_particle()
    particle.rotation = 0
    particle.theta = 0
    corners = particle.corners()
    xs = [x for x, _ in corners]
    ys = [y for _, y in corners]
    assert max(xs) - min(xs) == pytest.approx(particle.width)
    assert max(ys) - min(ys) == pytest.approx(particle.height)


@pytest.mark.parametrize("index", range(len(COLOR_THEMES)))
def test_color_themes(index):
    random.seed(index)
    for _ in range(50):
        color = COLOR_THEMES[index]()
        assert len(color) == 3
        assert all(isinstance(channel, int) and 0 <= channel <= 255 for channel in color)


def test_default_theme_is_dark_random():
    random.seed(9)
    for _ in range(100):
        assert all(channel < 200 for channel in COLOR_THEMES[0]())
    assert COLOR_THEMES[1]()[0] == 200


def test_container_draws_sprites():
    random.seed(10)
    container = AmbientContainer()
    particle = make_particle(width=50)
    particle.x = 20
    particle.y = 20
    particle.theta = 0
    particle.spline_y = [0.0] * len(particle.spline_x)
    particle.update(1000, 16)
    container.add(particle)
    screen = pygame.Surface((200, 200), pygame.SRCALPHA)
    container.render(screen, None)
    assert screen.get_bounding_rect().width > 0


def run_until_idle(clock, scheduler, system, step=50, limit=2000):
    for frame in range(limit):
        clock.advance(step)
        scheduler.tick()
        if not system.running:
            return frame
    raise AssertionError("ambient system never finished")


def test_system_drains_and_tears_down(clock, scheduler, page):
    random.seed(11)
    system = DomParticleSystem(page, scheduler, max_particles=3)
    system.start()
    assert system.running
    assert page.contains(system.container)
    container = system.container

    run_until_idle(clock, scheduler, system)

    assert system.spawned == 3
    assert system.particles == []
    assert len(container) == 0
    assert not page.contains(container)
    assert system.container is None
    assert scheduler.pending_timers == 0
    assert scheduler.pending_frames == 0


def test_first_frame_has_zero_delta(clock, scheduler, page):
    random.seed(12)
    system = DomParticleSystem(page, scheduler, max_particles=1)
    system.start()
    clock.advance(500)
    scheduler.tick()
    assert system.particles[0].frame == 0
    clock.advance(20)
    scheduler.tick()
    assert system.particles[0].frame == 20


def test_spawns_are_staggered(clock, scheduler, page):
    random.seed(13)
    system = DomParticleSystem(page, scheduler)
    system.start()
    assert system.spawned == 1
    assert system.spawn_pending
    for _ in range(20):
        clock.advance(40)
        scheduler.tick()
    # One spawn at most per tick, each waiting < 40 ms
    assert system.spawned == 21
    assert len(system.container) == len(system.particles)


def test_stop_spawning_lets_shower_finish(clock, scheduler, page):
    random.seed(14)
    system = DomParticleSystem(page, scheduler)
    system.start()
    for _ in range(10):
        clock.advance(16)
        scheduler.tick()
    system.stop_spawning()
    spawned = system.spawned
    assert not system.spawn_pending

    run_until_idle(clock, scheduler, system)
    assert system.spawned == spawned
    assert scheduler.pending_timers == 0
    assert scheduler.pending_frames == 0


def test_start_is_ignored_while_running(scheduler, page):
    random.seed(15)
    system = DomParticleSystem(page, scheduler, max_particles=2)
    system.start()
    container = system.container
    system.start()
    assert system.container is container
    assert system.spawned == 1
    assert scheduler.pending_frames == 1


def test_restart_after_teardown(clock, scheduler, page):
    random.seed(16)
    system = DomParticleSystem(page, scheduler, max_particles=1)
    system.start()
    run_until_idle(clock, scheduler, system)
    system.start()
    assert system.running
    assert system.spawned == 1
    assert page.contains(system.container)


def test_removed_particles_leave_the_container(clock, scheduler, page):
    random.seed(17)
    system = DomParticleSystem(page, scheduler, max_particles=2)
    system.start()
    clock.advance(50)
    scheduler.tick()
    first = system.particles[0]
    first.y = page.viewport.height + DEVIATION + 1
    clock.advance(16)
    scheduler.tick()
    assert first not in system.particles
    assert not first.alive()


def test_rejects_empty_limit(page, scheduler):
    with pytest.raises(ValueError):
        DomParticleSystem(page, scheduler, max_particles=0)
