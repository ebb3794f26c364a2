import os

from stockfolio.Init.main import create_app

config_name = os.getenv("STOCKFOLIO_ENV", "DevelopmentConfig")
app = create_app(config_name)


def main():
    app.run(
        host="0.0.0.0",
        port=app.config["PORT"],
        debug=app.config.get("DEBUG", False),
    )


if __name__ == "__main__":
    main()
