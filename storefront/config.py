import os
from dotenv import load_dotenv

load_dotenv()


class Config:
    """Base configuration."""
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'dev-secret-key-change-in-production'

    # The API is token-authenticated, forms only validate JSON bodies
    WTF_CSRF_ENABLED = False

    # Database - SQLite file in the instance folder for local development
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///storefront.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Identity provider tokens
    IDENTITY_TOKEN_SECRET = os.environ.get('IDENTITY_TOKEN_SECRET') or SECRET_KEY
    IDENTITY_TOKEN_MAX_AGE = int(os.environ.get('IDENTITY_TOKEN_MAX_AGE', 60 * 60 * 24))

    # Guest carts
    CART_SESSION_COOKIE = 'sessionId'
    CART_SESSION_HEADER = 'X-Session-Id'
    GUEST_CART_TTL_HOURS = int(os.environ.get('GUEST_CART_TTL_HOURS', 24 * 7))

    # Pagination
    ITEMS_PER_PAGE = 10
    MAX_ITEMS_PER_PAGE = 100
    RELATED_PRODUCTS_LIMIT = 4

    # Checkout pricing
    TAX_RATE = float(os.environ.get('TAX_RATE', 0.16))
    FREE_SHIPPING_THRESHOLD = float(os.environ.get('FREE_SHIPPING_THRESHOLD', 5000))
    FLAT_SHIPPING_COST = float(os.environ.get('FLAT_SHIPPING_COST', 300))
    LOW_STOCK_THRESHOLD = int(os.environ.get('LOW_STOCK_THRESHOLD', 5))

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    SQLALCHEMY_ECHO = False
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'DEBUG')


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False


class TestingConfig(Config):
    """Testing configuration."""
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    IDENTITY_TOKEN_SECRET = 'testing-identity-secret'
    LOG_LEVEL = 'WARNING'


config = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig
}
