import click

class CLIException(Exception):
    def __init__(self, *args, description:str = "Something happend..."):
        click.echo(description, err=True)
        self.description = description
        super().__init__(*(args or (description,)))
