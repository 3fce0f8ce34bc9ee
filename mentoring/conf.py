from django.conf import settings

DEFAULTS = {
    'SMS_PROVIDER_URL': '',
    'SMS_TIMEOUT': 10,
    'NOTIFY_ASYNC': False,
    'NOTIFY_WORKERS': 4,
}


def get_setting(name):
    return getattr(settings, 'MENTORING', {}).get(name, DEFAULTS[name])
