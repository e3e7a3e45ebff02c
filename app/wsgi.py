from app.routevault import create_app

app = create_app()
