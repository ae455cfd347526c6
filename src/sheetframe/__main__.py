from sheetframe import cli

cli.app()
