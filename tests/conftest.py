import pytest

from tmk_index import refresh_local_cache

NO_ADDRESS = object()


def build_parcel_page(
    names=("DOE, JOHN", "DOE, JANE"),
    mailing=("123 MAIN ST<br>", "HILO, HI 96720"),
    tax_values=("2014", "2015", "2016", "$1,500.00"),
    tmk="390010010000",
):
    """Minimal qPublic display page with the markup the parsers carve."""
    owner_cell = "&nbsp;" + "&nbsp;<br>&nbsp;".join(names) + "&nbsp;" if names else "&nbsp;"
    if mailing is NO_ADDRESS:
        mailing_cell = "&nbsp;"
    else:
        mailing_cell = "&nbsp;" + "&nbsp;".join(mailing) + "&nbsp;"

    rows = ['<tr><td class="tax_header">Tax Year</td><td class="tax_header">Amount Due</td></tr>']
    values = list(tax_values)
    for v in values[:-1]:
        rows.append(f'<tr><td class="tax_value">{v}</td><td class="tax_amount">$500.00</td></tr>')
    if values:
        rows.append(f'<tr><td class="tax_label">Total</td></tr><tr><td class="tax_value"><B>{values[-1]}</B></td></tr>')
    tax_table = "\n".join(rows)

    return f"""<html><head><title>Hawaii County qPublic</title></head><body>
<table class="owner_table">
<tr><td class="owner_header">Owner Name</td><td class="owner_value">{owner_cell}</td></tr>
<tr><td class="owner_header">Mailing Address</td><td class="owner_value">{mailing_cell}</td></tr>
<tr><td class="owner_header">Parcel Number</td><td class="owner_value">&nbsp;{tmk}&nbsp;</td></tr>
<tr><td class="owner_header">Location Address</td><td class="owner_value">&nbsp;75-100 ALII DR&nbsp;</td></tr>
</table>
<p class="section_header">Current Tax Bill Information</p>
<table class="tax_table">
{tax_table}
</table>
<p><B>Prior Year Information</B></p>
</body></html>"""


@pytest.fixture
def parcel_page():
    return build_parcel_page


@pytest.fixture
def no_address():
    return NO_ADDRESS


@pytest.fixture(autouse=True)
def _clear_reference_cache():
    refresh_local_cache()
    yield
    refresh_local_cache()
