"""Catalog of common React packages with their install commands."""

from __future__ import annotations

from pydantic import BaseModel, Field

ALL_CATEGORIES = "all"


class PackageEntry(BaseModel):
    """A package users commonly add to a fresh React project."""

    model_config = {"frozen": True}

    name: str = Field(..., description="Display name")
    command: str = Field(..., description="Shell command that installs the package")
    description: str = Field(default="")
    category: str = Field(..., description="Catalog category, e.g. 'ui'")


def _entry(name: str, command: str, description: str, category: str) -> PackageEntry:
    return PackageEntry(name=name, command=command, description=description, category=category)


PACKAGE_CATALOG: tuple[PackageEntry, ...] = (
    # UI components and routing
    _entry("React Router", "npm install react-router-dom",
           "Declarative routing for React applications", "routing"),
    _entry("Material-UI", "npm install @mui/material @emotion/react @emotion/styled",
           "React components implementing Google's Material Design", "ui"),
    _entry("Ant Design", "npm install antd",
           "Enterprise-ready UI components for React", "ui"),
    _entry("Chakra UI", "npm install @chakra-ui/react @emotion/react @emotion/styled framer-motion",
           "Modular and accessible component library", "ui"),
    _entry("React Bootstrap", "npm install react-bootstrap bootstrap",
           "Bootstrap components built for React", "ui"),
    # State management
    _entry("Redux Toolkit", "npm install @reduxjs/toolkit react-redux",
           "The official, opinionated, batteries-included toolset for Redux", "state"),
    _entry("Zustand", "npm install zustand",
           "Small, fast and scalable bearbones state-management solution", "state"),
    _entry("Recoil", "npm install recoil",
           "Experimental state management library by Facebook", "state"),
    # Styling
    _entry("Styled Components", "npm install styled-components",
           "CSS-in-JS library for styling React components", "styling"),
    _entry("Emotion", "npm install @emotion/react @emotion/styled",
           "CSS-in-JS library with great performance", "styling"),
    _entry("Tailwind CSS", "npm install tailwindcss postcss autoprefixer",
           "Utility-first CSS framework", "styling"),
    _entry("Sass", "npm install sass",
           "CSS preprocessor with variables and mixins", "styling"),
    # Testing
    _entry("Jest", "npm install --save-dev jest",
           "JavaScript testing framework", "testing"),
    _entry("React Testing Library", "npm install --save-dev @testing-library/react",
           "Testing utilities for React components", "testing"),
    _entry("Cypress", "npm install --save-dev cypress",
           "End-to-end testing framework", "testing"),
    # Build tools
    _entry("Webpack", "npm install --save-dev webpack webpack-cli",
           "Module bundler for JavaScript applications", "build"),
    _entry("Vite", "npm install --save-dev vite",
           "Fast build tool and dev server", "build"),
    _entry("Parcel", "npm install --save-dev parcel",
           "Zero configuration build tool", "build"),
    # Utilities
    _entry("Axios", "npm install axios",
           "Promise-based HTTP client for JavaScript", "utilities"),
    _entry("Lodash", "npm install lodash",
           "JavaScript utility library", "utilities"),
    _entry("Date-fns", "npm install date-fns",
           "Modern JavaScript date utility library", "utilities"),
    _entry("React Hook Form", "npm install react-hook-form",
           "Performant, flexible forms with easy validation", "utilities"),
    _entry("Formik", "npm install formik",
           "Build forms in React without tears", "utilities"),
)

CATEGORIES: tuple[str, ...] = ("ui", "routing", "state", "styling", "testing", "build", "utilities")


def filter_packages(
    packages: tuple[PackageEntry, ...] | list[PackageEntry] = PACKAGE_CATALOG,
    search_term: str = "",
    category: str = ALL_CATEGORIES,
) -> list[PackageEntry]:
    """Filter *packages* by category and a free-text search term.

    The category must match exactly unless it is ``"all"``. The search term
    is matched case-insensitively against name, description and category.
    An empty term and ``"all"`` return every package in the original order.
    """
    result = list(packages)

    if category != ALL_CATEGORIES:
        result = [pkg for pkg in result if pkg.category == category]

    term = search_term.strip().lower()
    if term:
        result = [
            pkg
            for pkg in result
            if term in pkg.name.lower()
            or term in pkg.description.lower()
            or term in pkg.category.lower()
        ]

    return result


def find_package(name: str, packages: tuple[PackageEntry, ...] = PACKAGE_CATALOG) -> PackageEntry | None:
    """Look up a catalog entry by display name, case-insensitively."""
    wanted = name.strip().lower()
    for pkg in packages:
        if pkg.name.lower() == wanted:
            return pkg
    return None


def packages_from_command(command: str) -> list[str]:
    """Extract the npm package names from an ``npm install`` command.

    Examples::

        packages_from_command("npm install --save-dev webpack webpack-cli")
        -> ["webpack", "webpack-cli"]
    """
    tokens = command.split()
    if len(tokens) < 2 or tokens[0] != "npm" or tokens[1] not in ("install", "i", "add"):
        return []
    return [tok for tok in tokens[2:] if not tok.startswith("-")]
