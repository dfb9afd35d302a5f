from edgedriver.main import app

app()
