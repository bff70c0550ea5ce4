"""quire renderers.

Renderers turn a node tree into a target notation by declaring handlers
per node type; the shared Walker drives the traversal.

Available Renderers:
- HtmlRenderer: nested HTML tags plus a generated stylesheet
- MarkupRenderer: linear caret control-code markup

Thread Safety:
Each render() call uses its own visit stack and color registry. A
renderer instance may be shared between threads; only its cumulative
``colors`` registry is shared, and it is append-only.

"""

from quire.renderers.base import BaseRenderer, RenderResult
from quire.renderers.html import HtmlRenderer
from quire.renderers.markup import MarkupRenderer

__all__ = ["BaseRenderer", "HtmlRenderer", "MarkupRenderer", "RenderResult"]
