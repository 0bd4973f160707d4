from receipt_processor import create_app
from receipt_processor.config import HOST, PORT

flask_app = create_app()


if __name__ == '__main__':
    flask_app.run(host=HOST, port=PORT, threaded=True)
    # setting threaded=True allows Flask to concurrently handle requests
