# app.py – thin bootstrap, all logic lives in webapp package

import logging

from dotenv import load_dotenv

# Load .env BEFORE importing db/webapp so DB_URL and SEASON are picked up
load_dotenv()

from webapp import create_app  # noqa: E402

app = create_app()

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    # local dev server for the pool UI
    app.run(debug=True, port=5001)
