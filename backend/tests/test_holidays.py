import unittest
from unittest import mock

import httpx

from sad.models import Holiday
from sad.services import holidays as hs
from tests.db_case import DbTestCase

PAGE = """
<html><body>
<h1>Festius locals</h1>
<table>
  <tr><th>Data</th><th>Festivitat</th></tr>
  <tr><td>1 de gener</td><td>Cap d'Any</td></tr>
  <tr><td>6 de gener</td><td>Reis</td></tr>
  <tr><td>9 de juny</td><td>Fira a Mataró</td></tr>
  <tr><td>24 de juny</td><td>Sant Joan</td></tr>
  <tr><td>28 de juliol</td><td>Festa major de Les Santes</td></tr>
  <tr><td>15 d'agost</td><td>L'Assumpció</td></tr>
  <tr><td>11 de setembre</td><td>Diada Nacional de Catalunya</td></tr>
  <tr><td>26 de desembre</td><td>Sant Esteve</td></tr>
  <tr><td>data per confirmar</td><td>Festa del barri</td></tr>
  <tr><td></td><td></td></tr>
</table>
</body></html>
"""


class ParsingTests(unittest.TestCase):
    def test_parse_holiday_date(self):
        self.assertEqual(hs.parse_holiday_date("1 de gener"), (1, 1))
        self.assertEqual(hs.parse_holiday_date("15 d'agost"), (15, 8))
        self.assertEqual(hs.parse_holiday_date("12 d’octubre"), (12, 10))
        self.assertEqual(hs.parse_holiday_date("19 de Març"), (19, 3))
        self.assertIsNone(hs.parse_holiday_date("1 de brumari"))
        self.assertIsNone(hs.parse_holiday_date(""))

    def test_determine_type(self):
        self.assertEqual(hs.determine_holiday_type("Nadal"), "national")
        self.assertEqual(hs.determine_holiday_type("Fira a Mataró"), "local")
        self.assertEqual(hs.determine_holiday_type("Dilluns de Pasqua Granada"), "regional")

    def test_parse_table(self):
        parsed = hs.parse_holidays_html(PAGE, 2025)
        self.assertEqual(len(parsed), 8)
        self.assertEqual(parsed[0], hs.HolidayData(day=1, month=1, year=2025, name="Cap d'Any", type="national"))
        self.assertEqual(parsed[2].type, "local")

    def test_parse_without_table(self):
        with self.assertRaises(ValueError):
            hs.parse_holidays_html("<html><p>No hi ha dades</p></html>", 2025)

    def test_validate_scraped(self):
        parsed = hs.parse_holidays_html(PAGE, 2025)
        warnings = hs.validate_scraped_holidays(parsed, 2025)
        self.assertEqual(warnings, ["Festivo esperado no encontrado: Nadal (25/12)"])
        with self.assertRaises(ValueError):
            hs.validate_scraped_holidays(parsed, 2026)
        with self.assertRaises(ValueError):
            hs.validate_scraped_holidays([], 2025)

    def test_scrape_uses_http(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, text=PAGE))
        original = httpx.Client

        def client_with_transport(*args, **kwargs):
            kwargs["transport"] = transport
            return original(*args, **kwargs)

        with mock.patch("sad.services.holidays.httpx.Client", side_effect=client_with_transport):
            parsed = hs.scrape_holidays(2025, "https://example.com/festius")
        self.assertEqual(len(parsed), 8)


class IntegrityTests(unittest.TestCase):
    def _h(self, day, month, name, type_="national", year=2025):
        return hs.HolidayData(day=day, month=month, year=year, name=name, type=type_)

    def test_errors(self):
        result = hs.validate_holidays_integrity(
            [self._h(1, 1, "Cap d'Any"), self._h(1, 1, "Cap d'Any"), self._h(2, 2, "X", "weird"), self._h(3, 3, " ", year=2024)],
            2025,
        )
        self.assertFalse(result.is_valid)
        joined = "\n".join(result.errors)
        self.assertIn("Festivo duplicado", joined)
        self.assertIn("Tipo de festivo inválido: weird", joined)
        self.assertIn("Año incorrecto: 2024", joined)
        self.assertIn("Nombre de festivo vacío", joined)

    def test_wrong_expected_type_is_warning(self):
        result = hs.validate_holidays_integrity([self._h(9, 6, "Fira a Mataró", "regional")], 2025)
        self.assertTrue(result.is_valid)
        self.assertIn("Tipo incorrecto para Fira a Mataró: esperado local, encontrado regional", result.warnings)
        self.assertEqual(result.summary["regional_holidays"], 1)

    def test_missing_required(self):
        present = [self._h(d, m, n) for d, m, n in hs.REQUIRED_HOLIDAYS if n != "Sant Joan"]
        self.assertEqual(hs.check_missing_holidays(present), ["Sant Joan (24/6)"])


class ImportTests(DbTestCase):
    def test_import_replaces_year(self):
        self.db.add(Holiday(day=2, month=2, year=2025, name="Old", type="local"))
        self.db.add(Holiday(day=2, month=2, year=2024, name="Other year", type="local"))
        self.db.commit()
        parsed = hs.parse_holidays_html(PAGE, 2025)
        inserted = hs.import_holidays(self.db, parsed + [parsed[0]])
        self.assertEqual(inserted, 8)
        names = [h.name for h in hs.get_holidays_for_year(self.db, 2025)]
        self.assertNotIn("Old", names)
        self.assertEqual(names[0], "Cap d'Any")
        self.assertEqual(len(hs.get_holidays_for_year(self.db, 2024)), 1)
        self.assertEqual(hs.holiday_days_for_month(self.db, 2025, 1), {1, 6})

    def test_import_empty(self):
        self.assertEqual(hs.import_holidays(self.db, []), 0)


if __name__ == "__main__":
    unittest.main()
