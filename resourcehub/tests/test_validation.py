"""Unit tests for the pure validation module: field rules, aggregation and sanitizing."""

from decimal import Decimal

import pytest

from resourcehub.services.validation import (
    EscrowTerms,
    FileMeta,
    ResourceForm,
    round_price,
    sanitize_resource_form,
    validate_cfx_id,
    validate_delivery_instructions,
    validate_description,
    validate_email,
    validate_escrow_fields,
    validate_images,
    validate_price,
    validate_resource_file,
    validate_resource_form,
    validate_resource_type,
    validate_title,
)

MB = 1024 * 1024
PNG = FileMeta(file_name="cover.png", content_type="image/png", size=200_000)
ZIP = FileMeta(file_name="resource.zip", content_type="application/zip", size=3 * MB)
DESCRIPTION = "x" * 60


def _form(**overrides) -> ResourceForm:
    values = {
        "title": "Police MDT System",
        "description": DESCRIPTION,
        "price": 19.99,
        "resource_type": "direct",
        "images": (PNG,),
        "resource_file": ZIP,
    }
    values.update(overrides)
    return ResourceForm(**values)


# ---------------------------------------------------------------------------
# Title / description
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("title", [None, "", "   "])
def test_title_required(title):
    assert validate_title(title) == "Title is required"


def test_title_length_is_checked_after_trimming():
    assert "at least 3" in validate_title("  ab  ")
    assert validate_title("  abc  ") is None
    assert "cannot exceed 100" in validate_title("a" * 101)
    assert validate_title("a" * 100) is None


@pytest.mark.parametrize("title", ["Police<MDT>", "Jobs: Trucker", 'Say "hi"', "a/b", "a|b", "why?", "tab\there"])
def test_title_rejects_forbidden_characters(title):
    assert validate_title(title) == "Title contains forbidden characters"


def test_description_bounds():
    assert "at least 50" in validate_description("d" * 40)
    assert validate_description("d" * 50) is None
    assert "cannot exceed 5000" in validate_description("d" * 5001)
    assert validate_description(None) == "Description is required"


# ---------------------------------------------------------------------------
# Price
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("price", [None, 0, -5, float("nan"), float("inf"), True])
def test_price_must_be_positive_number(price):
    assert validate_price(price) == "Price must be a positive number"


def test_price_bounds_and_precision():
    assert validate_price(0.001) == "Minimum price is 0.01"
    assert validate_price(1_000_000) == "Maximum price is 999999.99"
    assert validate_price(1.234) == "Price can have at most 2 decimal places"
    assert validate_price(19.99) is None
    assert validate_price(Decimal("5.10")) is None
    assert validate_price(999999.99) is None


def test_resource_type():
    assert validate_resource_type(None) == "Resource type is required"
    assert validate_resource_type("bundle") == "Invalid resource type"
    assert validate_resource_type("escrow") is None
    assert validate_resource_type("direct") is None


# ---------------------------------------------------------------------------
# Images / archive
# ---------------------------------------------------------------------------


def test_images_required_and_capped():
    assert validate_images([]) == "At least one image is required"
    assert validate_images([PNG] * 10) is None
    assert "at most 10" in validate_images([PNG] * 11)


def test_image_size_and_format():
    too_big = FileMeta(file_name="big.png", content_type="image/png", size=6 * MB)
    gif = FileMeta(file_name="anim.gif", content_type="image/gif", size=1000)
    mismatched = FileMeta(file_name="shot.png", content_type="image/jpeg", size=1000)
    jpeg = FileMeta(file_name="shot.JPEG", content_type="image/jpeg", size=1000)

    assert "5 MB" in validate_images([too_big])
    assert "unsupported format" in validate_images([gif])
    assert "does not match" in validate_images([mismatched])
    assert validate_images([jpeg]) is None


def test_resource_file_rules():
    assert validate_resource_file(None, "escrow") is None
    assert "required" in validate_resource_file(None, "direct")
    assert validate_resource_file(ZIP, "direct") is None

    pdf = FileMeta(file_name="manual.pdf", content_type="application/pdf", size=1000)
    rar = FileMeta(file_name="pack.rar", content_type="application/zip", size=1000)
    huge = FileMeta(file_name="huge.zip", content_type="application/zip", size=60 * MB)
    assert validate_resource_file(pdf, "direct") == "File must be a ZIP archive"
    assert validate_resource_file(rar, "direct") == "File must have the .zip extension"
    assert "50 MB" in validate_resource_file(huge, "direct")


def test_delivery_instructions_optional_but_bounded():
    assert validate_delivery_instructions(None) is None
    assert validate_delivery_instructions("i" * 1000) is None
    assert "1000" in validate_delivery_instructions("i" * 1001)


# ---------------------------------------------------------------------------
# Buyer escrow fields
# ---------------------------------------------------------------------------


def test_cfx_id_format():
    assert validate_cfx_id("123456789") is None
    assert validate_cfx_id("  abc123  ") is None
    assert validate_cfx_id("") == "CFX ID is required"
    assert validate_cfx_id("abc-123") is not None
    assert validate_cfx_id("a" * 51) is not None


def test_email_format():
    assert validate_email("buyer@example.com") is None
    assert validate_email("not-an-email") == "Email address is not valid"


def test_escrow_fields_required_and_optional():
    assert set(validate_escrow_fields(["cfx_id", "email"], {})) == {"cfx_id", "email"}
    assert validate_escrow_fields(["cfx_id"], {"cfx_id": "123456789"}) == {}
    # optional fields are still format-checked when supplied
    assert "email" in validate_escrow_fields([], {"email": "nope"})
    assert validate_escrow_fields([], {"email": None, "username": "  "}) == {}


# ---------------------------------------------------------------------------
# Aggregation and sanitizing
# ---------------------------------------------------------------------------


def test_valid_form_has_no_errors():
    assert validate_resource_form(_form()) == {}
    assert validate_resource_form(_form(resource_type="escrow", resource_file=None)) == {}


def test_form_errors_are_keyed_by_field():
    errors = validate_resource_form(_form(
        title="",
        description="too short",
        price=0,
        images=(),
        resource_file=None,
    ))
    assert set(errors) == {"title", "description", "price", "images", "resource_file"}


def test_escrow_instructions_checked_only_for_escrow():
    escrow = EscrowTerms(requires_cfx_id=True, delivery_instructions="i" * 1001)
    assert "delivery_instructions" in validate_resource_form(
        _form(resource_type="escrow", resource_file=None, escrow=escrow)
    )
    assert "delivery_instructions" not in validate_resource_form(_form(escrow=escrow))


def test_sanitize_trims_and_rounds():
    escrow = EscrowTerms(delivery_instructions="  Join our Discord  ")
    clean = sanitize_resource_form(_form(
        title="  Police MDT  ",
        description=f"  {DESCRIPTION}  ",
        price=10.005,
        escrow=escrow,
    ))
    assert clean.title == "Police MDT"
    assert clean.description == DESCRIPTION
    assert clean.price == Decimal("10.01")
    assert clean.escrow.delivery_instructions == "Join our Discord"


def test_sanitize_leaves_unusable_price_for_the_validator():
    assert sanitize_resource_form(_form(price=None)).price is None
    assert validate_price(sanitize_resource_form(_form(price=float("nan"))).price) is not None


def test_round_price_half_up():
    assert round_price(2.675) == Decimal("2.68")
    assert round_price(Decimal("0.125")) == Decimal("0.13")


@pytest.mark.parametrize(
    "form",
    [
        _form(),
        _form(title="  Padded Title  ", description=f"   {DESCRIPTION}"),
        _form(price=Decimal("150.50")),
        _form(resource_type="escrow", resource_file=None, escrow=EscrowTerms(delivery_instructions=" ok ")),
        _form(images=(PNG, FileMeta(file_name="b.jpg", content_type="image/jpeg", size=10))),
    ],
)
def test_sanitize_preserves_validity(form):
    assert validate_resource_form(sanitize_resource_form(form)) == validate_resource_form(form)
