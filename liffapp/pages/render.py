"""
HTML rendering for the three view states (Jinja2).

LOADING            → loading.html  (spinner, or the advisory when init halted)
ALREADY_REGISTERED → summary.html  (read-only table, no inputs)
FORM_ENTRY         → form.html     (inputs for the active name schema)
"""
from __future__ import annotations

from typing import Any, Dict, Tuple

from jinja2 import Environment, PackageLoader, select_autoescape

from liffapp.models import NameSchema
from liffapp.services.catalog_service import FieldCatalog
from liffapp.services.session_service import ACCESS_TOKEN_COOKIE
from liffapp.services.summary_service import build_summary
from liffapp.states import ViewModel, ViewState

LIFF_SDK_URL = "https://static.line-scdn.net/liff/edge/2/sdk.js"

EDIT_NOTICE   = "編集を希望の方はチャットからメッセージを送信してください"
OLD_NAME_HINT = "卒業時と苗字が変更された方は旧姓をご入力ください"

FIELD_LABELS: Dict[str, str] = {
    "email":          "メールアドレス",
    "name":           "氏名",
    "furigana":       "フリガナ",
    "last_name":      "姓",
    "first_name":     "名",
    "last_furigana":  "セイ",
    "first_furigana": "メイ",
    "old_name":       "旧姓（任意）",
}

# Name inputs laid out side by side, one tuple per row
NAME_ROWS: Dict[str, Tuple[Tuple[str, ...], ...]] = {
    NameSchema.SPLIT:    (("last_name", "first_name"), ("last_furigana", "first_furigana")),
    NameSchema.COMBINED: (("name",), ("furigana",)),
}

_TEMPLATES = {
    ViewState.LOADING:            "loading.html",
    ViewState.ALREADY_REGISTERED: "summary.html",
    ViewState.FORM_ENTRY:         "form.html",
}

_env = Environment(
    loader=PackageLoader("liffapp", "templates"),
    autoescape=select_autoescape(["html"]),
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_page(
    model: ViewModel,
    catalog: FieldCatalog,
    *,
    schema: str = NameSchema.SPLIT,
    liff_id: str = "",
    action: str = "/",
) -> str:
    """Render the page for the model's current state."""
    context: Dict[str, Any] = {
        "model":          model,
        "liff_id":        liff_id,
        "liff_sdk_url":   LIFF_SDK_URL,
        "token_cookie":   ACCESS_TOKEN_COOKIE,
        "login_pending":  model.login_pending,
        "token_rejected": model.token_rejected,
        "close_window":   model.closed,
    }

    if model.state is ViewState.ALREADY_REGISTERED:
        context["rows"] = build_summary(model.registered_user or {})
        context["edit_notice"] = EDIT_NOTICE
    elif model.state is ViewState.FORM_ENTRY:
        context.update(
            catalog=catalog,
            action=action,
            labels=FIELD_LABELS,
            name_rows=NAME_ROWS[schema],
            required=NameSchema.REQUIRED[schema],
            old_name_hint=OLD_NAME_HINT,
        )

    return _env.get_template(_TEMPLATES[model.state]).render(**context)
