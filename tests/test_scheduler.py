def test_frame_callbacks_get_tick_timestamp(clock, scheduler):
    seen = []
    scheduler.request_frame(seen.append)
    clock.advance(16)
    scheduler.tick()
    assert seen == [1016]
    assert scheduler.pending_frames == 0


def test_frame_requested_during_tick_runs_next_tick(clock, scheduler):
    seen = []

    def loop(timestamp):
        seen.append(timestamp)
        scheduler.request_frame(loop)

    scheduler.request_frame(loop)
    scheduler.tick()
    assert seen == [1000]
    clock.advance(16)
    scheduler.tick()
    assert seen == [1000, 1016]
    assert scheduler.pending_frames == 1


def test_cancel_frame(scheduler):
    seen = []
    handle = scheduler.request_frame(seen.append)
    scheduler.cancel_frame(handle)
    scheduler.tick()
    assert seen == []


def test_frame_cancelled_by_earlier_frame_in_same_tick(scheduler):
    seen = []
    handles = {}
    handles["first"] = scheduler.request_frame(lambda ts: scheduler.cancel_frame(handles["second"]))
    handles["second"] = scheduler.request_frame(seen.append)
    scheduler.tick()
    assert seen == []


def test_timers_fire_in_due_order(clock, scheduler):
    fired = []
    scheduler.set_timeout(lambda: fired.append("late"), 30)
    scheduler.set_timeout(lambda: fired.append("early"), 10)
    scheduler.set_timeout(lambda: fired.append("later"), 500)
    clock.advance(40)
    scheduler.tick()
    assert fired == ["early", "late"]
    assert scheduler.pending_timers == 1


def test_zero_delay_timer_runs_on_next_tick(scheduler):
    fired = []
    scheduler.set_timeout(lambda: fired.append(1), 0)
    assert fired == []
    scheduler.tick()
    assert fired == [1]


def test_timer_scheduled_by_timer_waits_for_next_tick(scheduler):
    fired = []

    def again():
        fired.append(len(fired))
        scheduler.set_timeout(again, 0)

    scheduler.set_timeout(again, 0)
    scheduler.tick()
    scheduler.tick()
    assert fired == [0, 1]


def test_clear_timeout(clock, scheduler):
    fired = []
    handle = scheduler.set_timeout(lambda: fired.append(1), 5)
    scheduler.clear_timeout(handle)
    clock.advance(10)
    scheduler.tick()
    assert fired == []
    assert scheduler.pending_timers == 0


def test_timer_cleared_by_earlier_timer_in_same_tick(clock, scheduler):
    fired = []
    handles = {}
    handles["first"] = scheduler.set_timeout(lambda: scheduler.clear_timeout(handles["second"]), 1)
    handles["second"] = scheduler.set_timeout(lambda: fired.append(1), 2)
    clock.advance(5)
    scheduler.tick()
    assert fired == []


def test_timers_run_before_frames(scheduler):
    order = []
    scheduler.request_frame(lambda ts: order.append("frame"))
    scheduler.set_timeout(lambda: order.append("timer"), 0)
    scheduler.tick()
    assert order == ["timer", "frame"]
