from datetime import date

from renewals.services.csv_import import parse_customers_csv


def test_parses_header_driven_rows():
    text = (
        "Company_Name, Contact_Name ,Primary_Email,CC_Emails,Plan_Name,Renew_Link,Expires_On,Paused\n"
        "Acme,Jane,Jane@Acme.io,boss@acme.io;ap@acme.io,Pro,https://acme.io/renew,2025-01-15,yes\n"
        "\n"
        "Globex,,ops@globex.io,,,,2025-02-01,\n"
    )

    rows, errors = parse_customers_csv(text)

    assert errors == []
    assert len(rows) == 2
    acme, globex = rows
    assert acme.company_name == "Acme"
    assert acme.cc_emails == ["boss@acme.io", "ap@acme.io"]
    assert acme.expires_on == date(2025, 1, 15)
    assert acme.paused is True
    assert globex.contact_name is None
    assert globex.renew_link is None
    assert globex.cc_emails == []
    assert globex.paused is False


def test_invalid_rows_are_reported_and_skipped():
    text = (
        "primary_email,expires_on\n"
        "not-an-email,2025-01-15\n"
        "ok@acme.io,2025-13-45\n"
        "fine@acme.io,2025-03-01\n"
    )

    rows, errors = parse_customers_csv(text)

    assert [r.primary_email for r in rows] == ["fine@acme.io"]
    assert len(errors) == 2
    assert errors[0].startswith("line 2: primary_email")
    assert errors[1].startswith("line 3: expires_on")


def test_header_must_name_required_columns():
    rows, errors = parse_customers_csv("company,email\nAcme,a@acme.io\n")
    assert rows == []
    assert "header must include" in errors[0]


def test_empty_input():
    assert parse_customers_csv("  \n") == ([], ["empty file"])


def test_quoted_cells_may_span_lines():
    text = (
        "company_name,primary_email,expires_on\n"
        '"Acme\nHoldings, Inc.",ops@acme.io,2025-01-15\n'
        "Globex,not-an-email,2025-02-01\n"
    )

    rows, errors = parse_customers_csv(text)

    assert [r.company_name for r in rows] == ["Acme\nHoldings, Inc."]
    assert len(errors) == 1
    assert errors[0].startswith("line 4: primary_email")
