import os

class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///turntimer.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Countdown cadence (seconds between ticks)
    TICK_INTERVAL_SEC = float(os.environ.get('TICK_INTERVAL_SEC', '1'))
    # Pause between a turn expiring and the auto-advance to the next turn
    AUTO_ADVANCE_DELAY_SEC = float(os.environ.get('AUTO_ADVANCE_DELAY_SEC', '1'))
    # Key of the persisted script state blob
    TURN_TIMER_STATE_KEY = os.environ.get('TURN_TIMER_STATE_KEY', 'TurnTimerOverlay')
    # Speaker name used for every chat message the timer sends
    CHAT_SPEAKER = os.environ.get('CHAT_SPEAKER', 'Turn Timer')
