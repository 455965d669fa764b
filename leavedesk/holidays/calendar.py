"""Built-in holiday calendars and state-code expansion.

National holidays apply to everyone. Regional holidays are optional and
carry the list of states that observe them; employees may take at most
``MAX_REGIONAL_HOLIDAYS_PER_YEAR`` of them.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Iterable, Optional

from leavedesk.common.constants import STATE_CODE_MAP, HolidayType

_ALL_STATES = (
    "AN AP AR AS BR CG CH DD DL DN GA GJ HP HR JH JK KA KL LD MH ML MN MP "
    "MZ NL OR PB PY RJ SK TG TN TR UK UP WB"
)


def expand_states(codes: Iterable[Optional[str]]) -> list[str]:
    """Map state codes to full names; unknown values pass through unchanged.

    Full names are not codes, so expanding an already-expanded list is a
    no-op.
    """
    expanded = []
    for code in codes:
        if not code:
            continue
        expanded.append(STATE_CODE_MAP.get(code, code))
    return expanded


@dataclass(frozen=True)
class HolidaySeed:
    name: str
    date: date
    is_national: bool
    is_optional: bool
    states: Optional[list[str]]
    holiday_type: HolidayType

    @property
    def year(self) -> int:
        return self.date.year

    @property
    def dedupe_key(self) -> str:
        return holiday_key(self.name, self.date)


def holiday_key(name: str, day: date) -> str:
    return f"{name}-{day.isoformat()}"


def _national(name: str, iso: str) -> HolidaySeed:
    return HolidaySeed(
        name=name,
        date=date.fromisoformat(iso),
        is_national=True,
        is_optional=False,
        states=None,
        holiday_type=HolidayType.national,
    )


def _regional(name: str, iso: str, codes: str) -> HolidaySeed:
    return HolidaySeed(
        name=name,
        date=date.fromisoformat(iso),
        is_national=False,
        is_optional=True,
        states=expand_states(codes.split()),
        holiday_type=HolidayType.regional,
    )


NATIONAL_HOLIDAYS_2026 = [
    _national("Republic Day", "2026-01-26"),
    _national("Independence Day", "2026-08-15"),
    _national("Gandhi Jayanti", "2026-10-02"),
]

REGIONAL_HOLIDAYS_2026 = [
    # January
    _regional("New Year's Day", "2026-01-01", "AR ML MN MZ NL PY RJ SK TG TN"),
    _regional("Gaan-Ngai", "2026-01-02", "MN"),
    _regional("New Year Holiday", "2026-01-02", "MZ"),
    _regional("Mannam Jayanti", "2026-01-02", "KL"),
    _regional("Hazrat Ali Jayanti", "2026-01-03", "UP"),
    _regional("Missionary Day", "2026-01-11", "MZ"),
    _regional("Swami Vivekananda Jayanti", "2026-01-12", "WB"),
    _regional("Makara Sankranti", "2026-01-14", "AR GJ KA OR SK TG"),
    _regional("Pongal", "2026-01-14", "AP PY TG TN"),
    _regional("Magh Bihu", "2026-01-15", "AS"),
    _regional("Thiruvalluvar Day", "2026-01-15", "PY TN"),
    _regional("Kanuma Panduga", "2026-01-16", "AP"),
    _regional("Uzhavar Thirunal", "2026-01-16", "TN"),
    _regional("Sonam Losar", "2026-01-19", "SK"),
    _regional("Netaji Subhas Chandra Bose Jayanti", "2026-01-23", "OR TR WB"),
    _regional("Vasant Panchami", "2026-01-23", "HR OR PB TR WB"),
    _regional("State Day", "2026-01-25", "HP"),
    # February
    _regional("Guru Ravidas Jayanti", "2026-02-01", "CH HP HR MP PB"),
    _regional("Lui-Ngai-Ni", "2026-02-15", "MN"),
    _regional(
        "Maha Shivaratri", "2026-02-15",
        "AP BR CG CH DD DL DN GJ HP HR JH JK KA KL MH MP OR RJ TG UK UP",
    ),
    _regional("Losar", "2026-02-18", "SK"),
    _regional("Chhatrapati Shivaji Maharaj Jayanti", "2026-02-19", "MH"),
    _regional("State Day", "2026-02-20", "AR MZ"),
    # March
    _regional(
        "Holi", "2026-03-03",
        "AN AP AR AS BR CG CH DD DL DN GJ HP HR JH JK MH MP NL OR RJ SK TG TR "
        "UK UP",
    ),
    _regional("Yaosang", "2026-03-03", "MN"),
    _regional("Doljatra", "2026-03-03", "WB"),
    _regional("Yaosang 2nd Day", "2026-03-04", "MN"),
    _regional("Panchayatiraj Divas", "2026-03-05", "OR"),
    _regional("Chapchar Kut", "2026-03-06", "MZ"),
    _regional("Shab-i-Qadr", "2026-03-17", "JK"),
    _regional("Ugadi", "2026-03-20", "AP DD DN GA GJ JK KA RJ TG"),
    _regional("Telugu New Year", "2026-03-20", "TN"),
    _regional("Jumat-ul-Wida", "2026-03-20", "JK"),
    _regional("Gudi Padwa", "2026-03-20", "MH"),
    _regional("Idul Fitr", "2026-03-21", _ALL_STATES),
    _regional("Sarhul", "2026-03-21", "JH"),
    _regional("Bihar Day", "2026-03-22", "BR"),
    _regional("Idul Fitr Holiday", "2026-03-22", "TG"),
    _regional("S. Bhagat Singh's Martyrdom Day", "2026-03-23", "HR"),
    _regional(
        "Ram Navami", "2026-03-27",
        "AN AP BR CG DD DN GJ HP HR MH MP OR PB RJ SK TG UK UP",
    ),
    _regional(
        "Mahavir Jayanti", "2026-03-31",
        "CG CH DD DL DN GJ HR JH KA LD MH MP MZ PB RJ TN UP",
    ),
    # April
    _regional("Odisha Day", "2026-04-01", "OR"),
    _regional(
        "Good Friday", "2026-04-03",
        "AN AP AR AS BR CG CH DD DL DN GA GJ HP JH KA KL LD MH ML MN MP MZ NL "
        "OR PB PY RJ SK TG TN TR UK UP WB",
    ),
    _regional("Easter Saturday", "2026-04-04", "NL"),
    _regional("Babu Jagjivan Ram Jayanti", "2026-04-05", "AP TG"),
    _regional("Easter Sunday", "2026-04-05", "KL NL"),
    _regional("Vaisakh", "2026-04-14", "CH JK PB"),
    _regional("Biju Festival", "2026-04-14", "TR"),
    _regional(
        "Dr Ambedkar Jayanti", "2026-04-14",
        "AP BR CG CH GA GJ HP HR JH JK KA KL MH MP OR PB PY RJ SK TG TN UK UP "
        "WB",
    ),
    _regional("Tamil New Year", "2026-04-14", "PY TN"),
    _regional("Vishu", "2026-04-14", "KL"),
    _regional("Maha Vishuba Sankranti", "2026-04-14", "OR"),
    _regional("Bohag Bihu", "2026-04-14", "AS"),
    _regional("Cheiraoba", "2026-04-14", "MN"),
    _regional("Bohag Bihu", "2026-04-15", "AR"),
    _regional("Bohag Bihu Holiday", "2026-04-15", "AS"),
    _regional("Bengali New Year", "2026-04-15", "TR WB"),
    _regional("Himachal Day", "2026-04-15", "HP"),
    _regional("Maharshi Parasuram Jayanti", "2026-04-19", "GJ HP HR MP RJ"),
    _regional("Basava Jayanti", "2026-04-20", "KA"),
    _regional("Garia Puja", "2026-04-21", "TR"),
    # May
    _regional("Maharashtra Day", "2026-05-01", "MH"),
    _regional(
        "Buddha Purnima", "2026-05-01",
        "AN AR CG CH DL HP JH JK MH MP MZ TR UK UP WB",
    ),
    _regional("May Day", "2026-05-01", "AS BR GA KA KL MN PY TG TN TR WB"),
    _regional("Guru Rabindranath Jayanti", "2026-05-09", "TR WB"),
    _regional("State Day", "2026-05-16", "SK"),
    _regional("Kazi Nazrul Islam Jayanti", "2026-05-26", "TR"),
    _regional(
        "Bakrid / Eid al Adha", "2026-05-27",
        "AN AP AS BR CG DL GA GJ HP HR JH JK KA KL LD MH ML MN MP MZ NL OR PB "
        "PY RJ TG TN TR UK UP WB",
    ),
    _regional("Bakrid / Eid al Adha Holiday", "2026-05-28", "JK"),
    # June
    _regional("Pahili Raja", "2026-06-14", "OR"),
    _regional("Raja Sankranti", "2026-06-15", "OR"),
    _regional("YMA Day", "2026-06-15", "MZ"),
    _regional("Maharana Pratap Jayanti", "2026-06-17", "HP HR RJ"),
    _regional("Sri Guru Arjun Dev Ji's Martyrdom Day", "2026-06-18", "PB"),
    _regional(
        "Muharram", "2026-06-26",
        "AN AP BR CG CH DD DL DN GJ HP JH JK KA LD MH MP MZ OR RJ TG TN TR UP "
        "WB",
    ),
    _regional("Sant Guru Kabir Jayanti", "2026-06-29", "CG HP HR PB"),
    _regional("Remna Ni", "2026-06-30", "MZ"),
    # July
    _regional("Guru Hargobind Ji's Birthday", "2026-07-01", "JK"),
    _regional("MHIP Day", "2026-07-06", "MZ"),
    _regional("Martyrs' Day", "2026-07-13", "JK"),
    _regional("Bhanu Jayanti", "2026-07-13", "SK"),
    _regional("Ratha Yathra", "2026-07-16", "MN OR"),
    _regional("U Tirot Sing Day", "2026-07-17", "ML"),
    _regional("Kharchi Puja", "2026-07-21", "TR"),
    _regional("Shaheed Udham Singh's Martyrdom Day", "2026-07-31", "HR"),
    # August
    _regional("Ker Puja", "2026-08-07", "TR"),
    _regional("Tendong Lho Rum Faat", "2026-08-08", "SK"),
    _regional("Bonalu", "2026-08-10", "TG"),
    _regional("Patriots Day", "2026-08-13", "MN"),
    _regional("Haryali Teej", "2026-08-15", "HR"),
    _regional("De Jure Transfer Day", "2026-08-16", "PY"),
    _regional("Parsi New Year", "2026-08-16", "DD DN GJ MH"),
    _regional(
        "Eid e Milad", "2026-08-25",
        "AP CG DD DL DN GJ HR JH JK KA KL LD MH MZ NL OR PY RJ TG TN TR UK UP",
    ),
    _regional("First Onam", "2026-08-25", "KL"),
    _regional("Jhulan Purnima", "2026-08-27", "OR"),
    _regional("Thiruvonam", "2026-08-27", "KL"),
    _regional("Raksha Bandhan", "2026-08-28", "CG DD DN GJ HR MP RJ UK UP"),
    _regional("Friday Following Eid e Milad", "2026-08-28", "JK"),
    # September
    _regional(
        "Janmashtami", "2026-09-04",
        "AN AP BR CG CH DD DL DN GJ HP HR JH JK MP NL OR RJ SK TG TN TR UK UP",
    ),
    _regional("Hartalika Teej", "2026-09-13", "CG SK"),
    _regional("Ganesh Chaturthi", "2026-09-15", "AP DD DN GA GJ KA MH OR PY TG TN"),
    _regional("Nuakhai", "2026-09-16", "OR"),
    _regional("Ganesh Chaturthi Holiday", "2026-09-16", "GA"),
    _regional("Ramdev Jayanti", "2026-09-21", "RJ"),
    _regional("Sree Narayana Guru Samadhi", "2026-09-21", "KL"),
    _regional("Teja Dashmi", "2026-09-21", "RJ"),
    _regional("Heroes' Martyrdom Day", "2026-09-23", "HR"),
    _regional("Indra Jatra", "2026-09-26", "SK"),
    _regional("Sree Narayana Guru Jayanti", "2026-09-26", "KL"),
    # October
    _regional("Mahalaya Amavasye", "2026-10-10", "KA OR TR WB"),
    _regional("First Day of Bathukamma", "2026-10-11", "TG"),
    _regional("Maharaja Agrasen Jayanti", "2026-10-11", "HR"),
    _regional("Ghatasthapana", "2026-10-11", "RJ"),
    _regional("Maha Saptami", "2026-10-18", "AS OR SK TR WB"),
    _regional("Kati Bihu", "2026-10-18", "AS"),
    _regional("Maha Ashtami", "2026-10-19", "AP AS JH MN OR RJ SK TG TR WB"),
    _regional(
        "Maha Navami", "2026-10-20",
        "AR AS BR JH KA KL ML NL OR PY SK TN TR UP WB",
    ),
    _regional(
        "Vijaya Dashami", "2026-10-21",
        "AN AP AR AS BR CG CH DD DL DN GA GJ HP HR JH JK KA KL LD MH ML MP MZ "
        "NL OR PB RJ SK TG TN TR UK UP WB",
    ),
    _regional("Lakshmi Puja", "2026-10-25", "OR TR WB"),
    _regional("Maharishi Valmiki Jayanti", "2026-10-26", "HP HR KA MP PB"),
    _regional("Sardar Vallabhbhai Patel Jayanti", "2026-10-31", "GJ"),
    # November
    _regional("Kut", "2026-11-01", "MN"),
    _regional("Puducherry Liberation Day", "2026-11-01", "PY"),
    _regional("Haryana Day", "2026-11-01", "HR"),
    _regional("Kannada Rajyothsava", "2026-11-01", "KA"),
    _regional("Lhabab Duchen", "2026-11-01", "SK"),
    _regional("Wangala Festival", "2026-11-06", "ML"),
    _regional("Diwali", "2026-11-08", _ALL_STATES),
    _regional("Deepavali Holiday", "2026-11-09", "HR KA MH RJ UK UP"),
    _regional("Vikram Samvat New Year", "2026-11-09", "GJ"),
    _regional("Govardhan Puja", "2026-11-09", "CH DD DN"),
    _regional("Bhai Dooj", "2026-11-11", "GJ RJ SK UK UP"),
    _regional("Ningol Chakkouba", "2026-11-12", "MN"),
    _regional("Chhath Puja", "2026-11-15", "BR CG DD DN JH"),
    _regional("Chhath Puja Holiday", "2026-11-16", "BR"),
    _regional("Seng Kut Snem", "2026-11-23", "ML"),
    _regional("Karthika Purnima", "2026-11-24", "OR TG"),
    _regional(
        "Guru Nanak Jayanti", "2026-11-24",
        "AN CG CH DD DL DN GJ HP HR JH JK LD MH MZ NL PB RJ UK UP WB",
    ),
    _regional("Kanakadasa Jayanti", "2026-11-27", "KA"),
    # December
    _regional("Indigenous Faith Day", "2026-12-01", "AR"),
    _regional("Feast of St Francis Xavier", "2026-12-03", "GA"),
    _regional("Sheikh Muhammad Abdullah Jayanti", "2026-12-05", "JK"),
    _regional("Pa Togan Nengminza Sangma", "2026-12-12", "ML"),
    _regional("Sri Guru Teg Bahadur Ji's Martyrdom Day", "2026-12-14", "PB"),
    _regional("Death Anniversary of U SoSo Tham", "2026-12-18", "ML"),
    _regional("Guru Ghasidas Jayanti", "2026-12-18", "CG"),
    _regional("Liberation Day", "2026-12-19", "DD GA"),
    _regional("Hazrat Ali Jayanti", "2026-12-23", "UP"),
    _regional("Christmas Holiday", "2026-12-24", "ML MZ"),
    _regional(
        "Christmas Day", "2026-12-25",
        "AN AP AR AS BR CG DD DL DN GA GJ HP HR JH JK KA KL LD MH ML MN MP MZ "
        "NL OR PB PY RJ SK TG TN TR UK UP WB",
    ),
    _regional("Shaheed Udham Singh Jayanti", "2026-12-26", "HR"),
    _regional("Christmas Holiday", "2026-12-26", "ML MZ TG"),
    _regional("U Kiang Nangbah", "2026-12-30", "ML"),
    _regional("Tamu Losar", "2026-12-30", "SK"),
    _regional("New Year's Eve", "2026-12-31", "MN MZ"),
]

BUILTIN_CALENDARS: dict[int, list[HolidaySeed]] = {
    2026: NATIONAL_HOLIDAYS_2026 + REGIONAL_HOLIDAYS_2026,
}


def builtin_calendar(year: int) -> list[HolidaySeed]:
    """Seed holidays shipped for *year*; empty when none are bundled."""
    return list(BUILTIN_CALENDARS.get(year, []))
