from cargobid import create_app

app = create_app()
