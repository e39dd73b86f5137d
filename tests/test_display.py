from turntimer.services.timer.display import build_display_text, color_for_remaining, format_time
from turntimer.services.timer.state import TimerConfig


def test_format_time():
    assert format_time(65) == "1:05"
    assert format_time(600) == "10:00"
    assert format_time(5) == "0:05"
    assert format_time(0) == "0:00"


def test_color_tiers_use_thresholds():
    config = TimerConfig(warning_threshold=30, danger_threshold=10)
    assert color_for_remaining(31, config) == config.default_color
    assert color_for_remaining(30, config) == config.warning_color
    assert color_for_remaining(11, config) == config.warning_color
    assert color_for_remaining(10, config) == config.danger_color
    assert color_for_remaining(0, config) == config.danger_color


def test_paused_color_overrides_tiers():
    config = TimerConfig()
    assert color_for_remaining(5, config, paused=True) == config.paused_color
    assert color_for_remaining(500, config, paused=True) == config.paused_color


def test_display_text_running_and_paused():
    config = TimerConfig()
    assert build_display_text("Alice", 90, False, config) == "🎯 Alice\n⏱️ 1:30"
    assert build_display_text("Alice", 90, True, config) == "🎯 Alice\n⏸️ 1:30 (PAUSED)"
