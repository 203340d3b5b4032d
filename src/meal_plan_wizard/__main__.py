from meal_plan_wizard.cli import cli

cli()
