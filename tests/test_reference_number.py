from sixloans.schemas import ProductTypeEnum
from sixloans.utils.reference_number import (
    application_number_from,
    category_code_for,
    generate_reference_number,
    is_valid_reference_number,
)


def test_loan_reference_with_category():
    assert generate_reference_number(123, "LOAN", "personal-loan") == "SIX-L-PER-00123-0D"


def test_missing_category_uses_generic_code():
    ref = generate_reference_number(1, "CREDIT_CARD", None)
    assert ref == "SIX-C-GEN-00001-0M"
    assert len(ref.rsplit("-", 1)[1]) == 2


def test_enum_product_type_is_accepted():
    assert generate_reference_number(123, ProductTypeEnum.loan, "personal-loan") == "SIX-L-PER-00123-0D"


def test_unknown_product_type_falls_back_to_x():
    assert generate_reference_number(7, "MORTGAGE", "home-loan") == "SIX-X-HOM-00007-0N"
    assert generate_reference_number(7, None).startswith("SIX-X-GEN-00007-")


def test_category_codes():
    assert category_code_for("credit-card") == "CRE"
    assert category_code_for("health-insurance") == "HEA"
    assert category_code_for("a") == "GEN"
    assert category_code_for("") == "GEN"


def test_generation_is_deterministic():
    first = generate_reference_number(42, "INSURANCE", "health-insurance")
    assert first == generate_reference_number(42, "INSURANCE", "health-insurance")
    assert first != generate_reference_number(43, "INSURANCE", "health-insurance")


def test_large_ids_widen_the_id_field():
    ref = generate_reference_number(123456, "APP", None)
    assert ref.split("-")[3] == "123456"
    assert is_valid_reference_number(ref)
    assert application_number_from(ref) == 123456


def test_validation_catches_typos():
    assert is_valid_reference_number("SIX-L-PER-00123-0D")
    assert is_valid_reference_number("six-l-per-00123-0d")
    assert not is_valid_reference_number("SIX-L-PER-00124-0D")
    assert not is_valid_reference_number("SIX-L-PER-00123-0E")
    assert not is_valid_reference_number("not-a-reference")
    assert not is_valid_reference_number("")


def test_application_number_from_reference():
    assert application_number_from("SIX-L-PER-00123-0D") == 123
    assert application_number_from("garbage") is None
