"""
Automated checks for the DGA Design System v1.0 catalogue.

Most checks are presence heuristics over the raw markup: no styles are
computed and no scripts run, so rules about rendered appearance only look at
inline style attributes and otherwise pass.
"""
import re
from urllib.parse import urlparse

from bs4.element import Tag

from app.features.compliance.services.checks import CheckRegistry, CheckResult
from app.features.compliance.utils.page_context import PageContext
from app.platform.utils.html import parse_inline_style, text_content

dga_checks = CheckRegistry()

APPROVED_FONTS = ("ibm plex sans arabic", "sst arabic", "cairo")
ARABIC_SCRIPT = re.compile(r"[؀-ۿ]")
ARABIC_PATH = re.compile(r"/ar(/|$)")
ARABIC_QUERY = re.compile(r"[?&]lang=ar")
PAGE_NUMBER = re.compile(r"[0-9]+")
# Domains that publish their Arabic edition elsewhere
ARABIC_FIRST_EXEMPT_HOSTS = ("gaft.gov.sa",)

NON_LIBRARY_LINK_COLORS = {"blue", "rgb(0,0,255)", "#00f", "#0000ff"}
PLAIN_TEXT_COLORS = {"black", "inherit", "rgb(0,0,0)", "#000", "#000000"}


def _compact(value: str) -> str:
    return value.replace(" ", "").lower()


def _mentions(text: str, *needles: str) -> bool:
    """Case-insensitive containment for Latin needles; Arabic needles match as-is."""
    lowered = text.lower()
    return any(needle.lower() in lowered for needle in needles)


def _has_label(element: Tag, context: PageContext) -> bool:
    element_id = element.get("id")
    if element_id and context.document.find("label", attrs={"for": element_id}) is not None:
        return True
    return element.find_parent("label") is not None


def _focus_outline_removed(element: Tag) -> bool:
    style = parse_inline_style(element.get("style"))
    return style.get("outline", "").lower() == "none" and not style.get("box-shadow")


# --- 1. GENERAL & FOUNDATION ---

@dga_checks.global_check("1")
def design_system_applied(context: PageContext):
    return context.root is not None


@dga_checks.global_check("2")
def approved_colors(context: PageContext):
    if context.exists("style", 'link[rel="stylesheet"]'):
        return True
    return CheckResult(
        passed=False,
        reason="No stylesheet found, so Color Design Tokens cannot be applied.",
        fix="Load the Platforms Code stylesheet and use its color tokens.",
    )


@dga_checks.element_check("3", "body")
def approved_typography(element: Tag, context: PageContext):
    font_family = parse_inline_style(element.get("style")).get("font-family")
    if not font_family:
        return True
    if any(font in font_family.lower() for font in APPROVED_FONTS):
        return True
    return CheckResult(
        passed=False,
        reason=f"Body font-family '{font_family}' is not an approved font.",
        fix='Use "IBM Plex Sans Arabic" through the Typography Design Tokens.',
    )


@dga_checks.global_check("4")
def spacing_tokens(context: PageContext):
    # Needs computed layout.
    return True


@dga_checks.global_check("5")
def responsive_viewport(context: PageContext):
    viewport = context.document.select_one('meta[name="viewport"]')
    if viewport is not None and "width=device-width" in (viewport.get("content") or ""):
        return True
    return CheckResult(
        passed=False,
        reason="Missing responsive viewport meta tag.",
        fix='Add <meta name="viewport" content="width=device-width, initial-scale=1">.',
    )


@dga_checks.global_check("6")
def library_icons(context: PageContext):
    return context.exists("svg", 'i[class*="icon"]', 'span[class*="icon"]')


# --- 2. TEMPLATES ---

@dga_checks.global_check("7")
def homepage_template(context: PageContext):
    return context.exists("main", "section")


@dga_checks.global_check("8")
def service_page_template(context: PageContext):
    return True


@dga_checks.global_check("9")
def e_participation_template(context: PageContext):
    return len(context.select("section")) >= 3


@dga_checks.global_check("10")
def search_template(context: PageContext):
    if context.exists(
        'input[type="search"]',
        '[role="search"]',
        '[class*="search"]', '[id*="search"]',
        '[class*="Search"]', '[id*="Search"]',
        'input[placeholder*="search"]', 'input[placeholder*="بحث"]',
    ):
        return True
    return CheckResult(
        passed=False,
        reason="No search bar found on the page.",
        fix='Add the search component (an input[type="search"] inside a role="search" landmark).',
    )


# --- 3. COMPONENTS ---

@dga_checks.global_check("11")
def digital_stamp(context: PageContext):
    for img in context.select("img"):
        alt = img.get("alt") or ""
        src = (img.get("src") or "").lower()
        if _mentions(alt, "stamp", "watheq", "ختم") or "stamp" in src or "watheq" in src:
            return True
    return CheckResult(
        passed=False,
        reason="Digital stamp image not found.",
        fix="Place the DGA digital stamp at the top of the page, linked to its certificate page.",
    )


@dga_checks.element_check("12", "button, .btn")
def button_states(element: Tag, context: PageContext):
    cursor = parse_inline_style(element.get("style")).get("cursor")
    return cursor is None or cursor.lower() == "pointer"


@dga_checks.global_check("13")
def dropdown_menu(context: PageContext):
    return context.exists(
        "select",
        '[role="listbox"]', '[role="combobox"]',
        '[class*="dropdown"]', '[class*="Dropdown"]',
        '[class*="select"]', '[class*="Select"]',
        '[class*="menu"]', '[class*="Menu"]',
    )


@dga_checks.element_check("14", "a")
def link_styles(element: Tag, context: PageContext):
    style = parse_inline_style(element.get("style"))
    color = _compact(style.get("color", ""))

    if color in NON_LIBRARY_LINK_COLORS:
        return CheckResult(
            passed=False,
            reason="Link uses a non-library blue color.",
            fix="Use the link color tokens from the Platforms Code library.",
        )

    decoration = (style.get("text-decoration-line") or style.get("text-decoration") or "").lower()
    if decoration.startswith("none") and color in PLAIN_TEXT_COLORS and element.find_parent("p"):
        return CheckResult(
            passed=False,
            reason="Link inside body text has no underline and the same color as the text.",
            fix="Underline inline links or give them a distinct color.",
        )

    if _focus_outline_removed(element):
        return CheckResult(
            passed=False,
            reason="Focus outline removed without a replacement focus style.",
            fix="Keep a visible focus state (outline or box-shadow).",
        )

    return True


@dga_checks.element_check("20", 'input[type="file"]')
def file_upload(element: Tag, context: PageContext):
    # The 2MB limit hint is optional copy; no reliable signal to fail on.
    return True


@dga_checks.element_check("21", 'input[type="checkbox"]')
def checkbox_label(element: Tag, context: PageContext):
    return _has_label(element, context)


@dga_checks.element_check("22", 'input[type="radio"]')
def radio_label(element: Tag, context: PageContext):
    return _has_label(element, context)


@dga_checks.element_check("24", "textarea")
def textarea_label(element: Tag, context: PageContext):
    element_id = element.get("id")
    if element_id and context.document.find("label", attrs={"for": element_id}) is not None:
        return True
    return element.has_attr("aria-label")


@dga_checks.global_check("25")
def tabs(context: PageContext):
    return context.exists(
        '[role="tablist"]',
        '[class*="tabs"]', '[class*="Tabs"]',
        '[class*="tab-group"]', '[class*="TabGroup"]',
        '[class*="nav-tabs"]',
    )


@dga_checks.global_check("26")
def tags_badges(context: PageContext):
    return context.exists(
        '[class*="badge"]', '[class*="Badge"]',
        '[class*="tag"]', '[class*="Tag"]',
        '[class*="chip"]', '[class*="Chip"]',
        '[class*="label"]', '[class*="Label"]',
    )


@dga_checks.global_check("27")
def footer(context: PageContext):
    if context.exists(
        "footer",
        '[role="contentinfo"]',
        '[class*="footer"]', '[class*="Footer"]',
        '[id*="footer"]', '[id*="Footer"]',
    ):
        return True
    if any(marker in context.body_text for marker in ("©", "Copyright", "حقوق")):
        return True
    return CheckResult(
        passed=False,
        reason="No footer found.",
        fix="Add the platform footer (a <footer> landmark with copyright and key links).",
    )


@dga_checks.global_check("28")
def cards(context: PageContext):
    return context.exists(
        '[class*="card"]', '[class*="Card"]',
        '[class*="panel"]', '[class*="Panel"]',
        '[class*="tile"]', '[class*="Tile"]',
    )


@dga_checks.element_check("29", 'nav, header, [role="banner"], [role="navigation"]')
def top_navigation(element: Tag, context: PageContext):
    # The 72px height rule needs rendered geometry.
    return True


@dga_checks.global_check("31")
def avatar(context: PageContext):
    return context.exists(
        '[class*="avatar"]', '[class*="Avatar"]',
        '[class*="profile-pic"]', '[class*="profilePic"]',
        '[class*="user-icon"]', '[class*="userIcon"]',
        'img[alt*="avatar"]', 'img[alt*="profile"]',
    )


@dga_checks.global_check("32")
def rating(context: PageContext):
    if context.exists(
        '[class*="rating"]', '[class*="Rating"]',
        '[class*="stars"]', '[class*="Stars"]',
        '[class*="review"]', '[class*="Review"]',
    ):
        return True
    return "★" in context.body_text or "⭐" in context.body_text


@dga_checks.global_check("33")
def tooltip(context: PageContext):
    return context.exists(
        '[role="tooltip"]',
        '[class*="tooltip"]', '[class*="Tooltip"]',
        '[class*="popover"]', '[class*="Popover"]',
        '[class*="hint"]', '[class*="Hint"]',
        "[title]",
    )


@dga_checks.element_check(
    "34", 'input:not([type="hidden"]):not([type="submit"]):not([type="checkbox"]):not([type="radio"])'
)
def input_field_label(element: Tag, context: PageContext):
    if _has_label(element, context):
        return True
    if element.has_attr("aria-label") or element.has_attr("placeholder"):
        if _focus_outline_removed(element):
            return CheckResult(
                passed=False,
                reason="Input removes its focus outline without a replacement focus style.",
                fix="Keep the focused state from the Input Field component.",
            )
        return True
    return CheckResult(
        passed=False,
        reason="Input field has no label.",
        fix='Associate a <label for="..."> or add an aria-label.',
    )


@dga_checks.global_check("35")
def table(context: PageContext):
    return context.exists(
        "table",
        '[role="table"]', '[role="grid"]',
        '[class*="table"]', '[class*="Table"]',
        '[class*="grid"]', '[class*="Grid"]',
        '[class*="data-table"]', '[class*="dataTable"]',
    )


@dga_checks.global_check("36")
def date_picker(context: PageContext):
    return context.exists(
        'input[type="date"]', 'input[type="datetime-local"]',
        '[class*="datepicker"]', '[class*="DatePicker"]',
        '[class*="date-picker"]',
        '[class*="calendar"]', '[class*="Calendar"]',
        '[class*="date-input"]',
    )


# --- 4. UX & USABILITY ---

@dga_checks.global_check("37")
def sitemap_link(context: PageContext):
    return any(
        _mentions(text_content(a), "sitemap", "خريطة الموقع") for a in context.select("a")
    )


@dga_checks.global_check("39")
def arabic_first(context: PageContext):
    try:
        hostname = urlparse(context.page_url or "").hostname or ""
    except ValueError:
        hostname = ""
    if any(host in hostname for host in ARABIC_FIRST_EXEMPT_HOSTS):
        return True

    root = context.root
    if root is not None and (root.get("lang") == "ar" or root.get("dir") == "rtl"):
        return True

    if _has_arabic_switch(context) or ARABIC_SCRIPT.search(context.body_text):
        return True

    return CheckResult(
        passed=False,
        reason="Page is not Arabic and offers no Arabic language switch.",
        fix='Serve Arabic by default (<html lang="ar" dir="rtl">) or link to the Arabic version.',
    )


def _has_arabic_switch(context: PageContext) -> bool:
    for link in context.select("a"):
        href = link.get("href") or ""
        if (
            link.get("hreflang") == "ar"
            or ARABIC_PATH.search(href)
            or ARABIC_QUERY.search(href)
            or _mentions(text_content(link).strip(), "العربية", "arabic")
        ):
            return True

    for button in context.select('button, [role="button"]'):
        if _mentions(button.get("aria-label") or "", "العربية", "arabic"):
            return True
        if _mentions(text_content(button).strip(), "العربية", "arabic"):
            return True

    for option in context.select("select option"):
        if option.get("value") == "ar" or _mentions(text_content(option).strip(), "العربية", "arabic"):
            return True

    if context.exists('link[rel="alternate"][hreflang="ar"]'):
        return True

    for element in context.select('[class*="lang"], [id*="lang"], [data-lang]'):
        if _mentions(text_content(element).strip(), "العربية", "arabic"):
            return True

    return False


@dga_checks.global_check("40")
def feedback_mechanism(context: PageContext):
    return any(
        _mentions(text_content(el), "feedback", "ملاحظات", "contact", "تواصل")
        for el in context.select("a, button")
    )


@dga_checks.global_check("41")
def privacy_notice(context: PageContext):
    for a in context.select("a"):
        if _mentions(text_content(a), "privacy", "الخصوصية") or "privacy" in (a.get("href") or ""):
            return True
    return CheckResult(
        passed=False,
        reason="No link to a privacy policy.",
        fix="Link the Privacy Policy from every page, usually in the footer.",
    )


@dga_checks.global_check("42")
def consistent_terminology(context: PageContext):
    return context.exists("h1", "h2", "h3")


@dga_checks.global_check("43")
def error_handling(context: PageContext):
    return True


@dga_checks.global_check("44")
def side_navigation(context: PageContext):
    return context.exists(
        "aside",
        '[class*="sidebar"]', '[class*="Sidebar"]',
        '[class*="sidenav"]', '[class*="SideNav"]',
        '[class*="side-nav"]',
        '[class*="drawer"]', '[class*="Drawer"]',
        '[id*="sidebar"]', '[id*="sidenav"]',
    )


@dga_checks.global_check("45")
def pagination(context: PageContext):
    if context.exists(
        '[role="navigation"][aria-label*="pagination"]',
        '[class*="pagination"]', '[class*="Pagination"]',
        '[class*="pager"]', '[class*="Pager"]',
    ):
        return True
    return any(
        PAGE_NUMBER.fullmatch(text_content(el).strip()) for el in context.select("a, button")
    )


@dga_checks.global_check("46")
def loading_indicator(context: PageContext):
    return context.exists(
        '[role="progressbar"]', '[role="status"]',
        '[class*="loader"]', '[class*="Loader"]',
        '[class*="spinner"]', '[class*="Spinner"]',
        '[class*="loading"]', '[class*="Loading"]',
        '[class*="progress"]', '[class*="Progress"]',
    )


@dga_checks.global_check("47")
def stepper(context: PageContext):
    return context.exists(
        '[class*="stepper"]', '[class*="Stepper"]',
        '[class*="steps"]', '[class*="Steps"]',
        '[class*="wizard"]', '[class*="Wizard"]',
        '[class*="progress-indicator"]',
    )


@dga_checks.global_check("48")
def visual_hierarchy(context: PageContext):
    if context.exists("h1"):
        return True
    return CheckResult(
        passed=False,
        reason="Page has no <h1> heading.",
        fix="Give every page a single <h1> followed by ordered h2-h4 headings.",
    )


@dga_checks.global_check("49")
def navigation(context: PageContext):
    if context.exists("nav", '[role="menu"]', '[role="navigation"]'):
        return True
    return CheckResult(
        passed=False,
        reason="No navigation landmark found.",
        fix="Wrap the main menu in <nav> (or role=\"navigation\").",
    )


@dga_checks.global_check("50")
def efficient_tasks(context: PageContext):
    return True


@dga_checks.global_check("51")
def help_resources(context: PageContext):
    return any(
        _mentions(text_content(a), "help", "مساعدة", "support", "دعم") for a in context.select("a")
    )


@dga_checks.global_check("52")
def clear_language(context: PageContext):
    return len(context.body_text) > 100


@dga_checks.global_check("74")
def no_mixed_language(context: PageContext):
    # Brand names legitimately mix scripts; needs a ratio threshold before it can fail.
    return True


@dga_checks.global_check("76")
def breadcrumb_matches_title(context: PageContext):
    document = context.document
    breadcrumb = (
        document.select_one('nav[aria-label="breadcrumb"]')
        or document.select_one('[class*="breadcrumb"]')
    )
    if breadcrumb is None:
        return True

    last_item = (
        breadcrumb.select_one('[aria-current="page"]')
        or breadcrumb.select_one(".active")
        or breadcrumb.select_one("span:last-child")
    )
    breadcrumb_text = text_content(last_item).strip()
    page_title = text_content(document.select_one("h1")).strip()

    if breadcrumb_text and page_title and breadcrumb_text.lower() != page_title.lower():
        return CheckResult(
            passed=False,
            reason=f"Last breadcrumb item '{breadcrumb_text}' does not match page title '{page_title}'.",
            fix="Use the page title as the last breadcrumb item.",
        )
    return True
