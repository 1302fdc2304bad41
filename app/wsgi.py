from app.prospects import create_app

app = create_app()
