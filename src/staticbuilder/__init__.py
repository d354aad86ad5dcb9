"""Staticbuilder — export a content site as plain static files.

Renders every content page (once per language) and every programmatic route
to files under an output directory, rewrites internal links for absolute,
root-relative or page-relative URLs, copies assets, and can emit nginx and
apache redirect maps.  Report mode lists what a build would change without
writing anything.

Quick start::

    import staticbuilder

    staticbuilder.build("my-site/")                    # write static/
    summary = staticbuilder.list_items("my-site/")     # report only
    staticbuilder.watch("my-site/")                    # rebuild on changes

Lower-level API::

    from staticbuilder import Builder, BuildConfig

    builder = Builder(site, BuildConfig(root=root, base_url="./"))
    builder.on_log(print)
    builder.run(write=True)

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0"
__all__ = [
    "BuildConfig",
    "Builder",
    "__version__",
    "build",
    "list_items",
    "watch",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import staticbuilder`` fast while providing a clean top-level API.
    """
    if name == "BuildConfig":
        from staticbuilder.config import BuildConfig

        return BuildConfig

    if name == "Builder":
        from staticbuilder.export.builder import Builder

        return Builder

    if name == "build":
        from staticbuilder.app import build

        return build

    if name == "list_items":
        from staticbuilder.app import list_items

        return list_items

    if name == "watch":
        from staticbuilder.app import watch

        return watch

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
