#!/usr/bin/env python3
"""Ad hoc query runner for the Recipe Generator.

Generate a single recipe from the command line without any web layer.

Usage:
    python query.py "Creamy chickpea curry"
    python query.py --filters vegan,indian "Weeknight curry"
    python query.py --debug --filters keto,highProtein "Sheet pan dinner"  # Show full JSON draft

Features:
- Runs the full pipeline (constraints, generation, compliance, nutrition, safety, image)
- Renders the recipe as markdown in the terminal
- Debug mode to display the full camelCase JSON draft
- Clean exit after completion
"""

import asyncio
import sys

from rich.console import Console
from rich.markdown import Markdown

from recipe_generator.models.errors import ComplianceError
from recipe_generator.models.models import RecipeDraft
from recipe_generator.pipeline.recipe_pipeline import generate_recipe
from recipe_generator.utils.logger import logger

console = Console()


def format_recipe_markdown(recipe: RecipeDraft) -> str:
    """Render a recipe draft as markdown (instructions are numbered here, not by the model)."""
    nutrition = recipe.nutrition_info
    lines = [
        f"# {recipe.title}",
        "",
        recipe.description,
        "",
        f"**Time:** {recipe.cooking_time} min | **Servings:** {recipe.servings}",
    ]
    if recipe.dietary_tags:
        lines.append(f"**Tags:** {', '.join(recipe.dietary_tags)}")
    lines.extend(["", "## Ingredients"])
    lines.extend(f"- {i.quantity} {i.name}" if i.quantity else f"- {i.name}" for i in recipe.ingredients)
    lines.extend(["", "## Instructions"])
    lines.extend(f"{n}. {step}" for n, step in enumerate(recipe.instructions, start=1))
    lines.extend([
        "",
        "## Nutrition (per serving)",
        f"{nutrition.calories:.0f} kcal | protein {nutrition.protein:g}g | "
        f"carbs {nutrition.carbs:g}g | fat {nutrition.fat:g}g",
    ])
    if recipe.image_url:
        lines.extend(["", f"![{recipe.title}]({recipe.image_url})"])
    return "\n".join(lines)


def run_query(prompt: str, filters: list[str], debug: bool = False) -> None:
    """Generate one recipe and print it.

    Args:
        prompt: Dish description.
        filters: Dietary/allergy/cuisine filter identifiers.
        debug: If True, display the full JSON draft.
    """
    try:
        logger.info(f"Running query: {prompt} (filters={filters})")
        logger.info("---")

        recipe = asyncio.run(generate_recipe({"prompt": prompt, "dietaryFilters": filters}))

        logger.info("---")
        console.print()

        if debug:
            console.print("[bold cyan]Debug Mode: Full Recipe[/bold cyan]")
            console.print("[dim]" + "=" * 60 + "[/dim]")
            console.print_json(data=recipe.model_dump(by_alias=True))
            console.print("[dim]" + "=" * 60 + "[/dim]")
            console.print()

        console.print(Markdown(format_recipe_markdown(recipe)))

    except KeyboardInterrupt:
        logger.info("\nQuery interrupted by user.")
        sys.exit(0)
    except ComplianceError as e:
        console.print(f"[red]✗ {e}[/red]")
        sys.exit(2)
    except Exception as e:
        logger.error(f"Query execution failed: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    usage = 'Usage: python query.py [--debug] [--filters a,b,c] "<dish description>"'
    if len(sys.argv) < 2:
        print(usage)
        print("")
        print("Examples:")
        print('  python query.py "Creamy chickpea curry"')
        print('  python query.py --filters vegan,indian "Weeknight curry"')
        print('  python query.py --debug --filters keto,highProtein "Sheet pan dinner"')
        sys.exit(1)

    debug_mode = False
    filters: list[str] = []
    argv_start = 1

    while argv_start < len(sys.argv) and sys.argv[argv_start].startswith("--"):
        if sys.argv[argv_start] == "--debug":
            debug_mode = True
            argv_start += 1
        elif sys.argv[argv_start] == "--filters":
            argv_start += 1
            if argv_start >= len(sys.argv):
                print("Error: --filters flag requires a comma-separated list")
                sys.exit(1)
            filters = [f.strip() for f in sys.argv[argv_start].split(",") if f.strip()]
            argv_start += 1
        else:
            print(f"Unknown flag: {sys.argv[argv_start]}")
            sys.exit(1)

    if argv_start >= len(sys.argv):
        print("Error: No dish description provided")
        print(usage)
        sys.exit(1)

    # Join all arguments after flags as the prompt (handles prompts with spaces)
    run_query(" ".join(sys.argv[argv_start:]), filters, debug=debug_mode)
