import os

from caltrail import create_app

app = create_app()

# `python run.py` for local development; use `flask --app run` or a WSGI server otherwise
if __name__ == "__main__":
    debug = os.getenv("FLASK_ENV", "development") == "development"
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", 5000)), debug=debug)
