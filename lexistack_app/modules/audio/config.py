# File: lexistack_app/modules/audio/config.py


class AudioModuleDefaultConfig:
    AUDIO_DEFAULT_LANG = "en"
    # Background synthesis threads shared by every speech channel
    AUDIO_MAX_WORKERS = 2
