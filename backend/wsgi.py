from doctorplanet import create_app

app = create_app()
