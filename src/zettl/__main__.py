from zettl.cli import app

app(prog_name="zettl")
