from datetime import date

import pytest

from app.core.utils import (
    academic_year,
    barcode_check_digit,
    generate_barcode_id,
    year_label,
)


@pytest.mark.parametrize(
    'batch, expected',
    [
        ('1', '1st Year'),
        ('2', '2nd Year'),
        ('3', '3rd Year'),
        ('4', '4th Year'),
        ('11', '11th Year'),
        ('12', '12th Year'),
        ('13', '13th Year'),
        ('21', '21st Year'),
        ('22', '22nd Year'),
        ('111', '111th Year'),
        (5, '5th Year'),
        (' 3 ', '3rd Year'),
        (None, 'N/A'),
        ('', 'N/A'),
        ('abc', 'N/A'),
        ('0', 'N/A'),
        ('-1', 'N/A'),
    ],
)
def test_year_label(batch, expected):
    assert year_label(batch) == expected


def test_academic_year():
    assert academic_year('2', today=date(2025, 3, 1)) == '2nd Year / 2025-2026'
    assert academic_year(None, today=date(2025, 3, 1)) == 'N/A / 2025-2026'


def test_barcode_check_digit():
    # 3 * 1 + 1 * 2 = 5 -> (10 - 5) % 10
    assert barcode_check_digit('000000000012') == '5'
    assert barcode_check_digit('000000000000') == '0'


def test_generate_barcode_id():
    barcode_id = generate_barcode_id()
    assert len(barcode_id) == 13
    assert barcode_id.isdigit()
    assert barcode_check_digit(barcode_id[:12]) == barcode_id[-1]
