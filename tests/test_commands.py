import pytest

from turntimer.services.timer import dispatcher
from turntimer.services.timer.commands import (
    AddTimeCommand,
    ChatMessage,
    ConfigCommand,
    HelpCommand,
    NextCommand,
    PauseCommand,
    PreviousCommand,
    SetTimeCommand,
    StartCommand,
    StatusCommand,
    StopCommand,
    parse_command,
)
from turntimer.services.timer.state import ConfigKey, TimerConfig, apply_setting


@pytest.mark.parametrize('content, expected', [
    ('!tt start', StartCommand(None)),
    ('!tt start 90', StartCommand(90)),
    ('!TurnTimer START 45s', StartCommand(45)),
    ('!tt start soon', StartCommand(None)),
    ('!tt stop', StopCommand()),
    ('!tt pause', PauseCommand()),
    ('!tt resume', PauseCommand()),
    ('!tt next', NextCommand()),
    ('!tt prev', PreviousCommand()),
    ('!tt previous', PreviousCommand()),
    ('!tt add', AddTimeCommand(30)),
    ('!tt add 15', AddTimeCommand(15)),
    ('!tt add lots', AddTimeCommand(30)),
    ('!tt set 120', SetTimeCommand(120)),
    ('!tt set never', SetTimeCommand(None)),
    ('!tt config', ConfigCommand(None, None)),
    ('!tt config Duration 45', ConfigCommand('duration', '45')),
    ('!tt status', StatusCommand()),
    ('!tt', HelpCommand()),
    ('!tt dance', HelpCommand()),
])
def test_parse_command(content, expected):
    assert parse_command(content) == expected


def test_parse_ignores_other_messages():
    assert parse_command('hello there') is None
    assert parse_command('!roll 1d20') is None
    assert parse_command('') is None


def test_apply_setting_coercion():
    config = TimerConfig()
    assert apply_setting(config, ConfigKey.DURATION, '45') == 45
    assert apply_setting(config, ConfigKey.DURATION, 'abc') == 60
    assert apply_setting(config, ConfigKey.AUTO_ADVANCE, 'off') is False
    assert apply_setting(config, ConfigKey.AUTO_ADVANCE, 'on') is True
    assert apply_setting(config, ConfigKey.WHISPER, 'TRUE') is True
    assert apply_setting(config, ConfigKey.FONT_SIZE, None) == 56
    assert config.default_duration == 60
    assert config.whisper_to_gm is True


def _say(content, who='GM'):
    return dispatcher.handle_chat_message(ChatMessage(content=content, who=who))


def test_non_api_messages_are_ignored(timer, party, chat_log):
    assert dispatcher.handle_chat_message(ChatMessage('!tt start', 'GM', type='general')) is None
    assert timer.state.is_running is False
    assert chat_log == []


def test_chat_start_and_stop(timer, party, chat_log):
    _say('!tt start 90')
    assert timer.state.is_running
    assert timer.state.remaining_time == 90
    _say('!tt stop')
    assert timer.state.is_running is False
    assert chat_log[-1] == ('Turn Timer', 'Timer stopped.')


def test_chat_add_uses_default_for_bad_input(timer, party):
    _say('!tt start 60')
    _say('!tt add lots')
    assert timer.state.remaining_time == 90


def test_chat_set_ignores_bad_input(timer, party):
    _say('!tt start 60')
    _say('!tt set never')
    assert timer.state.remaining_time == 60
    _say('!tt set 20')
    assert timer.state.remaining_time == 20


def test_chat_config_change_is_whispered(timer, party, chat_log):
    _say('!tt config duration 45', who='Dana')
    assert timer.config.default_duration == 45
    assert chat_log[-1] == ('Turn Timer', '/w Dana Setting updated: duration = 45')

    _say('!tt config autoadvance off', who='Dana')
    assert timer.config.auto_advance is False
    assert chat_log[-1][1] == '/w Dana Setting updated: autoadvance = false'


def test_chat_config_unknown_key(timer, chat_log):
    _say('!tt config colour red', who='Dana')
    assert chat_log == [('Turn Timer', '/w Dana Unknown setting: colour')]
    assert timer.config == TimerConfig()


def test_chat_config_reset(timer, chat_log):
    _say('!tt config duration 45')
    _say('!tt config whisper on')
    _say('!tt config reset')
    assert timer.config == TimerConfig()
    assert chat_log[-1] == ('Turn Timer', '/w GM Configuration reset to defaults.')


def test_chat_config_display(timer, chat_log):
    _say('!tt config')
    content = chat_log[-1][1]
    assert content.startswith('/w GM &{template:default} {{name=Turn Timer Config}}')
    assert '{{Duration=60s}}' in content
    assert '{{Auto Advance=true}}' in content


def test_chat_status(timer, party, chat_log):
    _say('!tt start 90')
    _say('!tt status', who='Eli')
    content = chat_log[-1][1]
    assert content.startswith('/w Eli ')
    assert '{{Running=true}}' in content
    assert '{{Paused=false}}' in content
    assert '{{Current Turn=Alice}}' in content
    assert '{{Time Remaining=1:30}}' in content


def test_chat_help_for_unknown_subcommand(timer, chat_log):
    _say('!tt dance', who='Eli')
    content = chat_log[-1][1]
    assert content.startswith('/w Eli &{template:default} {{name=Turn Timer Help}}')
    assert 'reset' in content


def test_chat_navigation(timer, party, chat_log):
    _say('!tt next')
    assert chat_log[-1][1] == 'Advanced to: Bob'
    _say('!tt prev')
    assert chat_log[-1][1] == 'Went back to: Alice'
    _say('!tt start')
    _say('!tt pause')
    assert timer.state.is_paused
    _say('!tt resume')
    assert not timer.state.is_paused
