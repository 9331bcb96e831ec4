from .base import *

DEBUG = False

SECRET_KEY = 'test-secret-key'

DATABASES = {
    'default': {
        'ENGINE': 'django.db.backends.sqlite3',
        'NAME': ':memory:',
    }
}

ALLOWED_HOSTS = ['testserver']

JWT_SECRET = 'test-jwt-secret-0123456789abcdef0123'

PAYTM = {
    'MID': 'TESTMID00000000001',
    'MERCHANT_KEY': 'abcdEFGH1234ijkl',
    'ENVIRONMENT': 'staging',
    'WEBSITE': '',
    'CALLBACK_URL': 'https://testserver/api/payments/paytm/callback',
    'ORDER_PREFIX': 'MSH',
    'TIMEOUT': 5.0,
}
