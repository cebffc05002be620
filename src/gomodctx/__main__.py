from gomodctx.cli import app

app(prog_name="gomodctx")
