#!/usr/bin/env python3
"""Development server for the Safety Checklist backend."""
import os

from backend.app import create_app

if __name__ == '__main__':
    app = create_app()
    app.run(debug=True, host='0.0.0.0', port=int(os.getenv('PORT', '5000')))
