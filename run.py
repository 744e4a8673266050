"""
Application Entry Point
Starts the complaint tracker API on the Flask development server.
`flask --app run seed` re-creates the default admin and departments.
"""

import os
from app import create_app

app = create_app(os.getenv('FLASK_ENV', 'development'))

if __name__ == '__main__':
    host = os.getenv('FLASK_HOST', '0.0.0.0')
    port = int(os.getenv('FLASK_PORT', 5000))

    app.logger.info(f"Complaint tracker API listening on {host}:{port}")
    app.run(debug=app.config.get('DEBUG', False), host=host, port=port)
