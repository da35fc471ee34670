# Storefront API - development entry point
# `flask run` and WSGI servers pick up `app` from this module

import os

from storefront import create_app

app = create_app(os.environ.get('FLASK_CONFIG'))

if __name__ == '__main__':
    app.run(debug=app.config.get('DEBUG', False), host='0.0.0.0', port=5000)
