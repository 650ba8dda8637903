"""
Jinja2 integration for access checks.

Block directives, each closed by a single `endauth`:

    {% role "Administrator" %} ... {% endauth %}
    {% roles ["Administrator", "Executive"] %} ... {% endauth %}
    {% needsroles ["Administrator", "Executive"] %} ... {% endauth %}
    {% permission "blog.post.edit" %} ... {% endauth %}
    {% permissions ["blog.post.edit", "blog.post.delete"] %} ... {% endauth %}
    {% needspermissions ["blog.post.edit", "blog.post.delete"] %} ... {% endauth %}

and the equivalent functions for use inside expressions:

    {% if permission("blog.post.edit") and not role("Administrator") %}

Both read the `grants` template variable (a `Grants` snapshot).  A
template rendered without grants denies everything.
"""

from typing import Any, Optional

from fastapi import Request
from fastapi.templating import Jinja2Templates
from jinja2 import Environment, FileSystemLoader, nodes, pass_context, select_autoescape
from jinja2.ext import Extension

from modbase.auth.access import Grants
from modbase.core.config import settings

# tag -> (Grants method, require_all)
DIRECTIVES = {
    "role": ("has_role", None),
    "roles": ("has_roles", False),
    "needsroles": ("has_roles", True),
    "permission": ("allow", None),
    "permissions": ("allow_multiple", False),
    "needspermissions": ("allow_multiple", True),
}


def check(grants: Any, directive: str, value: Any, require_all: Optional[bool] = None) -> bool:
    if not isinstance(grants, Grants):
        return False

    method, default_all = DIRECTIVES[directive]
    evaluate = getattr(grants, method)
    if default_all is None:
        return evaluate(value)
    if isinstance(value, (str, int)):
        value = [value]
    return evaluate(value, default_all if require_all is None else bool(require_all))


class AccessExtension(Extension):
    tags = set(DIRECTIVES)

    def parse(self, parser):
        token = next(parser.stream)
        args = [nodes.Const(token.value), nodes.Name("grants", "load"), parser.parse_expression()]
        if parser.stream.skip_if("comma"):
            args.append(parser.parse_expression())

        body = parser.parse_statements(("name:endauth",), drop_needle=True)
        test = self.call_method("_check", args, lineno=token.lineno)
        return nodes.If(test, body, [], [], lineno=token.lineno)

    def _check(self, directive, grants, value, require_all=None):
        return check(grants, directive, value, require_all)


def _directive(name: str):
    @pass_context
    def evaluate(context, value, require_all=None):
        return check(context.get("grants"), name, value, require_all)

    evaluate.__name__ = name
    return evaluate


def create_environment(directory: Optional[str] = None) -> Environment:
    env = Environment(
        loader=FileSystemLoader(directory or settings.TEMPLATES_DIR),
        autoescape=select_autoescape(["html", "xml"]),
        extensions=[AccessExtension],
    )
    env.globals.update(
        role=_directive("role"),
        roles=_directive("roles"),
        needs_roles=_directive("needsroles"),
        permission=_directive("permission"),
        permissions=_directive("permissions"),
        needs_permissions=_directive("needspermissions"),
    )
    return env


environment = create_environment()
templates = Jinja2Templates(env=environment)


def render(name: str, grants: Optional[Grants] = None, **context: Any) -> str:
    return environment.get_template(name).render(grants=grants, **context)


def template_response(request: Request, name: str, grants: Optional[Grants] = None, **context: Any):
    return templates.TemplateResponse(request, name, {"grants": grants, **context})
