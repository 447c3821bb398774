from pickem import create_app
from pickem.services import get_api, get_store

app = create_app()


@app.shell_context_processor
def make_shell_context():
    return {"api": get_api(), "store": get_store()}


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=5000, debug=app.config.get("DEBUG", False))
