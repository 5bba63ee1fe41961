from __future__ import annotations

import logging
from dataclasses import replace

from repaso.core.models import Player, ShopItem

logger = logging.getLogger(__name__)


def can_buy(player: Player, item: ShopItem) -> bool:
    return player.coins >= item.price and item.id not in player.owned_items


def is_equipped(player: Player, item: ShopItem) -> bool:
    return player.equipped_items.get(item.category) == item.id


def buy(player: Player, item: ShopItem) -> Player:
    """Deduct the price and add *item* to the inventory; unchanged if not allowed."""
    if not can_buy(player, item):
        logger.debug("%s cannot buy %s (coins=%d)", player.name, item.id, player.coins)
        return player
    return replace(
        player,
        coins=player.coins - item.price,
        owned_items=player.owned_items | {item.id},
    )


def equip(player: Player, item: ShopItem) -> Player:
    """Put an owned item in its category slot, replacing whatever was there."""
    if item.id not in player.owned_items:
        logger.debug("%s cannot equip unowned item %s", player.name, item.id)
        return player
    equipped = dict(player.equipped_items)
    equipped[item.category] = item.id
    return replace(player, equipped_items=equipped)
