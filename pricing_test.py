#   Copyright 2026 UCP Authors
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.

"""Tests for delivery price calculation."""

from absl.testing import absltest
from models import RetailerSettings
from services import pricing_service


def _settings(**payment) -> RetailerSettings:
  return RetailerSettings.model_validate({"payment": payment})


class SumAccessorialsTest(absltest.TestCase):

  def test_mapping_fees(self) -> None:
    rate = {
        "cost": 8000,
        "accessorial_fees": {"a": {"cost": 1500}, "b": {"cost": 500}},
    }
    self.assertEqual(pricing_service.sum_accessorials(rate), 10000)

  def test_list_fees_and_missing_costs(self) -> None:
    rate = {
        "cost": 8000,
        "accessorial_fees": [{"cost": 1500}, {"name": "stairs"}, None],
    }
    self.assertEqual(pricing_service.sum_accessorials(rate), 9500)

  def test_no_fees(self) -> None:
    self.assertEqual(pricing_service.sum_accessorials({"cost": 4200}), 4200)


class ComputePriceTest(absltest.TestCase):

  def test_paid_by_customer(self) -> None:
    self.assertEqual(
        pricing_service.compute_price(10000, _settings(type=0)), 10000
    )

  def test_paid_by_shipper(self) -> None:
    self.assertEqual(pricing_service.compute_price(10000, _settings(type=1)), 0)

  def test_split(self) -> None:
    settings = _settings(type=2, split_ratio=50)
    self.assertEqual(pricing_service.compute_price(10000, settings), 5000)

  def test_split_uses_remaining_share(self) -> None:
    settings = _settings(type=2, split_ratio=25)
    self.assertEqual(pricing_service.compute_price(10000, settings), 7500)

  def test_fixed_can_go_negative(self) -> None:
    settings = _settings(type=3, fixed=99)
    self.assertEqual(pricing_service.compute_price(9500, settings), -400)

  def test_round_nearest_picks_next_value_up(self) -> None:
    settings = _settings(type=4, round_nearest=[10000, 9000, 9500])
    self.assertEqual(pricing_service.compute_price(8700, settings), 9000)

  def test_round_nearest_keeps_price_when_nothing_is_higher(self) -> None:
    settings = _settings(type=4, round_nearest=[5000, 8700])
    self.assertEqual(pricing_service.compute_price(8700, settings), 8700)

  def test_round_nearest_ignores_values_outside_window(self) -> None:
    settings = _settings(type=4, round_nearest=[300000])
    self.assertEqual(pricing_service.compute_price(8700, settings), 8700)

  def test_strategy_name_is_accepted(self) -> None:
    settings = _settings(type="PAID_BY_SHIPPER")
    self.assertEqual(pricing_service.compute_price(10000, settings), 0)

  def test_unknown_strategy_returns_none(self) -> None:
    self.assertIsNone(pricing_service.compute_price(10000, _settings(type=9)))
    self.assertIsNone(pricing_service.compute_price(10000, _settings()))


class FormatPriceTest(absltest.TestCase):

  def test_active_limit_caps_before_scaling(self) -> None:
    settings = _settings(type=0, limit={"active": True, "amount": 10000})
    self.assertEqual(pricing_service.format_price(12000, settings), 1000000)

  def test_inactive_limit_is_ignored(self) -> None:
    settings = _settings(type=0, limit={"active": False, "amount": 10000})
    self.assertEqual(pricing_service.format_price(12000, settings), 1200000)

  def test_limit_above_price_keeps_price(self) -> None:
    settings = _settings(type=0, limit={"active": True, "amount": 20000})
    self.assertEqual(pricing_service.format_price(12000, settings), 1200000)


class QuotePriceTest(absltest.TestCase):

  def test_full_pipeline(self) -> None:
    rate = {"cost": 8000, "accessorial_fees": {"a": {"cost": 2000}}}
    settings = _settings(type=2, split_ratio=50)
    self.assertEqual(pricing_service.quote_price(rate, settings), 500000)

  def test_unknown_strategy(self) -> None:
    self.assertIsNone(
        pricing_service.quote_price({"cost": 100}, _settings(type=7))
    )


if __name__ == "__main__":
  absltest.main()
