"""
Tests for reply formatting.
"""

from datetime import datetime

from bryx_bot.schemas import (
    CategoryStats,
    Product,
    ProductsResponse,
    Sale,
    SalesResponse,
    StatsResponse,
)
from bryx_bot.telegram_bot.formatters import (
    SHIPPED_MARKER,
    format_products,
    format_sales,
    format_stats,
    mark_shipped,
)


def make_products(count: int, total: int) -> ProductsResponse:
    return ProductsResponse(
        total=total,
        products=[
            Product(id=i, name=f"Товар {i}", category="Телефоны", sale_price=1000 * i, status="В наличии")
            for i in range(1, count + 1)
        ],
    )


class TestFormatProducts:

    def test_truncation_notice(self):
        text = format_products(make_products(5, 12))
        assert text.startswith("📦 Товары (первые 5 из 12):")
        assert text.splitlines()[-1] == "Показано 5 из 12 товаров"

    def test_no_notice_when_everything_shown(self):
        text = format_products(make_products(3, 3))
        assert "Показано" not in text

    def test_empty(self):
        assert format_products(ProductsResponse(total=0)) == "📦 Товары не найдены"

    def test_item_lines_and_markers(self):
        data = ProductsResponse(total=1, products=[
            Product(id=1, name="Pixel 8", category="Телефоны", sale_price=23999.9,
                    status="Продан", is_favorite=True, is_defective=True),
        ])
        lines = format_products(data).splitlines()
        assert lines[2] == "⭐ ⚠️ Pixel 8"
        assert lines[3] == "  └ Категория: Телефоны"
        assert lines[4] == "  └ Цена: 23,999.90 грн"
        assert lines[5] == "  └ Статус: Продан"


class TestFormatSales:

    def test_sale_lines(self):
        data = SalesResponse(total=8, sales=[
            Sale(id=42, buyer="Олена", sale_date=datetime(2025, 3, 7, 14, 0),
                 total_amount=1500, status="Новая", product_count=2),
        ])
        text = format_sales(data)
        assert "#42 - Олена" in text
        assert "  └ Дата: 07.03.2025" in text
        assert "  └ Сумма: 1,500.00 грн" in text
        assert "  └ Товаров: 2 шт." in text
        assert text.splitlines()[-1] == "Показано 1 из 8 продаж"

    def test_empty(self):
        assert format_sales(SalesResponse()) == "💰 Продажи не найдены"


class TestFormatStats:

    def test_top_five_categories_in_given_order(self):
        names = ["Телефоны", "Ноутбуки", "Планшеты", "Часы", "Наушники", "Кабели", "Чехлы"]
        data = StatsResponse(categories=[
            CategoryStats(category=name, count=10 - i) for i, name in enumerate(names)
        ])
        lines = format_stats(data).splitlines()
        start = lines.index("📋 Топ категорий:")
        category_lines = lines[start + 1:]
        assert category_lines == [f"  └ {name}: {10 - i} шт." for i, name in enumerate(names[:5])]

    def test_totals(self):
        data = StatsResponse.model_validate({
            "products": {"total": 40, "inStock": 25, "sold": 12, "expected": 3},
            "sales": {"total": 12, "totalAmount": 210000, "today": {"count": 2, "amount": 37000.5}},
        })
        text = format_stats(data)
        assert "  └ В наличии: 25" in text
        assert "  └ Ожидается: 3" in text
        assert "  └ Общая сумма: 210,000.00 грн" in text
        assert "  └ Сумма сегодня: 37,000.50 грн" in text
        assert "Топ категорий" not in text


class TestMarkShipped:

    def test_appends_marker(self):
        assert mark_shipped("Продажа #42") == f"Продажа #42\n\n{SHIPPED_MARKER}"

    def test_escapes_original_text(self):
        assert mark_shipped("Чехол <Spigen> & плёнка").startswith("Чехол &lt;Spigen&gt; &amp; плёнка")

    def test_missing_text(self):
        assert mark_shipped(None) == f"\n\n{SHIPPED_MARKER}"
