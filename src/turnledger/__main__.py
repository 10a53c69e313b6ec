from turnledger.cli import app

app(prog_name="turnledger")
