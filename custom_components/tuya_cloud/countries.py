"""Country to platform datacenter mapping.

Country codes and endpoints follow the Tuya OEM app data center
distribution table.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

from .const import DEFAULT_ENDPOINT


@dataclass(frozen=True)
class Country:
    name: str
    country_code: str
    endpoint: str = DEFAULT_ENDPOINT


_COUNTRY_LIST = [
    Country("Afghanistan", "93", "https://openapi.tuyaeu.com"),
    Country("Albania", "355", "https://openapi.tuyaeu.com"),
    Country("Algeria", "213", "https://openapi.tuyaeu.com"),
    Country("American Samoa", "1-684", "https://openapi.tuyaeu.com"),
    Country("Andorra", "376", "https://openapi.tuyaeu.com"),
    Country("Angola", "244", "https://openapi.tuyaeu.com"),
    Country("Anguilla", "1-264", "https://openapi.tuyaeu.com"),
    Country("Antarctica", "672", "https://openapi.tuyaus.com"),
    Country("Antigua and Barbuda", "1-268", "https://openapi.tuyaeu.com"),
    Country("Argentina", "54", "https://openapi.tuyaus.com"),
    Country("Armenia", "374", "https://openapi.tuyaeu.com"),
    Country("Aruba", "297", "https://openapi.tuyaeu.com"),
    Country("Australia", "61", "https://openapi.tuyaeu.com"),
    Country("Austria", "43", "https://openapi.tuyaeu.com"),
    Country("Azerbaijan", "994", "https://openapi.tuyaeu.com"),
    Country("Bahamas", "1-242", "https://openapi.tuyaeu.com"),
    Country("Bahrain", "973", "https://openapi.tuyaeu.com"),
    Country("Bangladesh", "880", "https://openapi.tuyaeu.com"),
    Country("Barbados", "1-246", "https://openapi.tuyaeu.com"),
    Country("Belarus", "375", "https://openapi.tuyaeu.com"),
    Country("Belgium", "32", "https://openapi.tuyaeu.com"),
    Country("Belize", "501", "https://openapi.tuyaeu.com"),
    Country("Benin", "229", "https://openapi.tuyaeu.com"),
    Country("Bermuda", "1-441", "https://openapi.tuyaeu.com"),
    Country("Bhutan", "975", "https://openapi.tuyaeu.com"),
    Country("Bolivia", "591", "https://openapi.tuyaus.com"),
    Country("Bosnia and Herzegovina", "387", "https://openapi.tuyaeu.com"),
    Country("Botswana", "267", "https://openapi.tuyaeu.com"),
    Country("Brazil", "55", "https://openapi.tuyaus.com"),
    Country("British Indian Ocean Territory", "246", "https://openapi.tuyaus.com"),
    Country("British Virgin Islands", "1-284", "https://openapi.tuyaeu.com"),
    Country("Brunei", "673", "https://openapi.tuyaeu.com"),
    Country("Bulgaria", "359", "https://openapi.tuyaeu.com"),
    Country("Burkina Faso", "226", "https://openapi.tuyaeu.com"),
    Country("Burundi", "257", "https://openapi.tuyaeu.com"),
    Country("Cambodia", "855", "https://openapi.tuyaeu.com"),
    Country("Cameroon", "237", "https://openapi.tuyaeu.com"),
    Country("Canada", "1", "https://openapi.tuyaus.com"),
    Country("Capo Verde", "238", "https://openapi.tuyaeu.com"),
    Country("Cayman Islands", "1-345", "https://openapi.tuyaeu.com"),
    Country("Central African Republic", "236", "https://openapi.tuyaeu.com"),
    Country("Chad", "235", "https://openapi.tuyaeu.com"),
    Country("Chile", "56", "https://openapi.tuyaus.com"),
    Country("China", "86", "https://openapi.tuyacn.com"),
    Country("Christmas Island", "61"),
    Country("Cocos Islands", "61"),
    Country("Colombia", "57", "https://openapi.tuyaus.com"),
    Country("Comoros", "269", "https://openapi.tuyaeu.com"),
    Country("Cook Islands", "682", "https://openapi.tuyaus.com"),
    Country("Costa Rica", "506", "https://openapi.tuyaeu.com"),
    Country("Croatia", "385", "https://openapi.tuyaeu.com"),
    Country("Cuba", "53"),
    Country("Curacao", "599", "https://openapi.tuyaus.com"),
    Country("Cyprus", "357", "https://openapi.tuyaeu.com"),
    Country("Czech Republic", "420", "https://openapi.tuyaeu.com"),
    Country("Democratic Republic of the Congo", "243", "https://openapi.tuyaeu.com"),
    Country("Denmark", "45", "https://openapi.tuyaeu.com"),
    Country("Djibouti", "253", "https://openapi.tuyaeu.com"),
    Country("Dominica", "1-767", "https://openapi.tuyaeu.com"),
    Country("Dominican Republic", "1-809", "https://openapi.tuyaus.com"),
    Country("East Timor", "670", "https://openapi.tuyaus.com"),
    Country("Ecuador", "593", "https://openapi.tuyaus.com"),
    Country("Egypt", "20", "https://openapi.tuyaeu.com"),
    Country("El Salvador", "503", "https://openapi.tuyaeu.com"),
    Country("Equatorial Guinea", "240", "https://openapi.tuyaeu.com"),
    Country("Eritrea", "291", "https://openapi.tuyaeu.com"),
    Country("Estonia", "372", "https://openapi.tuyaeu.com"),
    Country("Ethiopia", "251", "https://openapi.tuyaeu.com"),
    Country("Falkland Islands", "500", "https://openapi.tuyaus.com"),
    Country("Faroe Islands", "298", "https://openapi.tuyaeu.com"),
    Country("Fiji", "679", "https://openapi.tuyaeu.com"),
    Country("Finland", "358", "https://openapi.tuyaeu.com"),
    Country("France", "33", "https://openapi.tuyaeu.com"),
    Country("French Polynesia", "689", "https://openapi.tuyaeu.com"),
    Country("Gabon", "241", "https://openapi.tuyaeu.com"),
    Country("Gambia", "220", "https://openapi.tuyaeu.com"),
    Country("Georgia", "995", "https://openapi.tuyaeu.com"),
    Country("Germany", "49", "https://openapi.tuyaeu.com"),
    Country("Ghana", "233", "https://openapi.tuyaeu.com"),
    Country("Gibraltar", "350", "https://openapi.tuyaeu.com"),
    Country("Greece", "30", "https://openapi.tuyaeu.com"),
    Country("Greenland", "299", "https://openapi.tuyaeu.com"),
    Country("Grenada", "1-473", "https://openapi.tuyaeu.com"),
    Country("Guam", "1-671", "https://openapi.tuyaeu.com"),
    Country("Guatemala", "502", "https://openapi.tuyaus.com"),
    Country("Guernsey", "44-1481"),
    Country("Guinea", "224"),
    Country("Guinea-Bissau", "245", "https://openapi.tuyaus.com"),
    Country("Guyana", "592", "https://openapi.tuyaeu.com"),
    Country("Haiti", "509", "https://openapi.tuyaeu.com"),
    Country("Honduras", "504", "https://openapi.tuyaeu.com"),
    Country("Hong Kong", "852", "https://openapi.tuyaus.com"),
    Country("Hungary", "36", "https://openapi.tuyaeu.com"),
    Country("Iceland", "354", "https://openapi.tuyaeu.com"),
    Country("India", "91", "https://openapi.tuyain.com"),
    Country("Indonesia", "62", "https://openapi.tuyaus.com"),
    Country("Iran", "98"),
    Country("Iraq", "964", "https://openapi.tuyaeu.com"),
    Country("Ireland", "353", "https://openapi.tuyaeu.com"),
    Country("Isle of Man", "44-1624"),
    Country("Israel", "972", "https://openapi.tuyaeu.com"),
    Country("Italy", "39", "https://openapi.tuyaeu.com"),
    Country("Ivory Coast", "225", "https://openapi.tuyaeu.com"),
    Country("Jamaica", "1-876", "https://openapi.tuyaeu.com"),
    Country("Japan", "81", "https://openapi.tuyaus.com"),
    Country("Jersey", "44-1534"),
    Country("Jordan", "962", "https://openapi.tuyaeu.com"),
    Country("Kazakhstan", "7", "https://openapi.tuyaeu.com"),
    Country("Kenya", "254", "https://openapi.tuyaeu.com"),
    Country("Kiribati", "686", "https://openapi.tuyaus.com"),
    Country("Kosovo", "383"),
    Country("Kuwait", "965", "https://openapi.tuyaeu.com"),
    Country("Kyrgyzstan", "996", "https://openapi.tuyaeu.com"),
    Country("Laos", "856", "https://openapi.tuyaeu.com"),
    Country("Latvia", "371", "https://openapi.tuyaeu.com"),
    Country("Lebanon", "961", "https://openapi.tuyaeu.com"),
    Country("Lesotho", "266", "https://openapi.tuyaeu.com"),
    Country("Liberia", "231", "https://openapi.tuyaeu.com"),
    Country("Libya", "218", "https://openapi.tuyaeu.com"),
    Country("Liechtenstein", "423", "https://openapi.tuyaeu.com"),
    Country("Lithuania", "370", "https://openapi.tuyaeu.com"),
    Country("Luxembourg", "352", "https://openapi.tuyaeu.com"),
    Country("Macao", "853", "https://openapi.tuyaus.com"),
    Country("Macedonia", "389", "https://openapi.tuyaeu.com"),
    Country("Madagascar", "261", "https://openapi.tuyaeu.com"),
    Country("Malawi", "265", "https://openapi.tuyaeu.com"),
    Country("Malaysia", "60", "https://openapi.tuyaus.com"),
    Country("Maldives", "960", "https://openapi.tuyaeu.com"),
    Country("Mali", "223", "https://openapi.tuyaeu.com"),
    Country("Malta", "356", "https://openapi.tuyaeu.com"),
    Country("Marshall Islands", "692", "https://openapi.tuyaeu.com"),
    Country("Mauritania", "222", "https://openapi.tuyaeu.com"),
    Country("Mauritius", "230", "https://openapi.tuyaeu.com"),
    Country("Mayotte", "262", "https://openapi.tuyaeu.com"),
    Country("Mexico", "52", "https://openapi.tuyaus.com"),
    Country("Micronesia", "691", "https://openapi.tuyaeu.com"),
    Country("Moldova", "373", "https://openapi.tuyaeu.com"),
    Country("Monaco", "377", "https://openapi.tuyaeu.com"),
    Country("Mongolia", "976", "https://openapi.tuyaeu.com"),
    Country("Montenegro", "382", "https://openapi.tuyaeu.com"),
    Country("Montserrat", "1-664", "https://openapi.tuyaeu.com"),
    Country("Morocco", "212", "https://openapi.tuyaeu.com"),
    Country("Mozambique", "258", "https://openapi.tuyaeu.com"),
    Country("Myanmar", "95", "https://openapi.tuyaus.com"),
    Country("Namibia", "264", "https://openapi.tuyaeu.com"),
    Country("Nauru", "674", "https://openapi.tuyaus.com"),
    Country("Nepal", "977", "https://openapi.tuyaeu.com"),
    Country("Netherlands", "31", "https://openapi.tuyaeu.com"),
    Country("Netherlands Antilles", "599"),
    Country("New Caledonia", "687", "https://openapi.tuyaeu.com"),
    Country("New Zealand", "64", "https://openapi.tuyaus.com"),
    Country("Nicaragua", "505", "https://openapi.tuyaeu.com"),
    Country("Niger", "227", "https://openapi.tuyaeu.com"),
    Country("Nigeria", "234", "https://openapi.tuyaeu.com"),
    Country("Niue", "683", "https://openapi.tuyaus.com"),
    Country("North Korea", "850"),
    Country("Northern Mariana Islands", "1-670", "https://openapi.tuyaeu.com"),
    Country("Norway", "47", "https://openapi.tuyaeu.com"),
    Country("Oman", "968", "https://openapi.tuyaeu.com"),
    Country("Pakistan", "92", "https://openapi.tuyaeu.com"),
    Country("Palau", "680", "https://openapi.tuyaeu.com"),
    Country("Palestine", "970", "https://openapi.tuyaus.com"),
    Country("Panama", "507", "https://openapi.tuyaeu.com"),
    Country("Papua New Guinea", "675", "https://openapi.tuyaus.com"),
    Country("Paraguay", "595", "https://openapi.tuyaus.com"),
    Country("Peru", "51", "https://openapi.tuyaus.com"),
    Country("Philippines", "63", "https://openapi.tuyaus.com"),
    Country("Pitcairn", "64"),
    Country("Poland", "48", "https://openapi.tuyaeu.com"),
    Country("Portugal", "351", "https://openapi.tuyaeu.com"),
    Country("Puerto Rico", "1-787, 1-939", "https://openapi.tuyaus.com"),
    Country("Qatar", "974", "https://openapi.tuyaeu.com"),
    Country("Republic of the Congo", "242", "https://openapi.tuyaeu.com"),
    Country("Reunion", "262", "https://openapi.tuyaeu.com"),
    Country("Romania", "40", "https://openapi.tuyaeu.com"),
    Country("Russia", "7", "https://openapi.tuyaeu.com"),
    Country("Rwanda", "250", "https://openapi.tuyaeu.com"),
    Country("Saint Barthelemy", "590", "https://openapi.tuyaeu.com"),
    Country("Saint Helena", "290"),
    Country("Saint Kitts and Nevis", "1-869", "https://openapi.tuyaeu.com"),
    Country("Saint Lucia", "1-758", "https://openapi.tuyaeu.com"),
    Country("Saint Martin", "590", "https://openapi.tuyaeu.com"),
    Country("Saint Pierre and Miquelon", "508", "https://openapi.tuyaeu.com"),
    Country("Saint Vincent and the Grenadines", "1-784", "https://openapi.tuyaeu.com"),
    Country("Samoa", "685", "https://openapi.tuyaeu.com"),
    Country("San Marino", "378", "https://openapi.tuyaeu.com"),
    Country("Sao Tome and Principe", "239", "https://openapi.tuyaus.com"),
    Country("Saudi Arabia", "966", "https://openapi.tuyaeu.com"),
    Country("Senegal", "221", "https://openapi.tuyaeu.com"),
    Country("Serbia", "381", "https://openapi.tuyaeu.com"),
    Country("Seychelles", "248", "https://openapi.tuyaeu.com"),
    Country("Sierra Leone", "232", "https://openapi.tuyaeu.com"),
    Country("Singapore", "65", "https://openapi.tuyaeu.com"),
    Country("Sint Maarten", "1-721", "https://openapi.tuyaus.com"),
    Country("Slovakia", "421", "https://openapi.tuyaeu.com"),
    Country("Slovenia", "386", "https://openapi.tuyaeu.com"),
    Country("Solomon Islands", "677", "https://openapi.tuyaus.com"),
    Country("Somalia", "252", "https://openapi.tuyaeu.com"),
    Country("South Africa", "27", "https://openapi.tuyaeu.com"),
    Country("South Korea", "82", "https://openapi.tuyaus.com"),
    Country("South Sudan", "211"),
    Country("Spain", "34", "https://openapi.tuyaeu.com"),
    Country("Sri Lanka", "94", "https://openapi.tuyaeu.com"),
    Country("Sudan", "249"),
    Country("Suriname", "597", "https://openapi.tuyaus.com"),
    Country("Svalbard and Jan Mayen", "4779", "https://openapi.tuyaus.com"),
    Country("Swaziland", "268", "https://openapi.tuyaeu.com"),
    Country("Sweden", "46", "https://openapi.tuyaeu.com"),
    Country("Switzerland", "41", "https://openapi.tuyaeu.com"),
    Country("Syria", "963"),
    Country("Taiwan", "886", "https://openapi.tuyaus.com"),
    Country("Tajikistan", "992", "https://openapi.tuyaeu.com"),
    Country("Tanzania", "255", "https://openapi.tuyaeu.com"),
    Country("Thailand", "66", "https://openapi.tuyaus.com"),
    Country("Togo", "228", "https://openapi.tuyaeu.com"),
    Country("Tokelau", "690", "https://openapi.tuyaus.com"),
    Country("Tonga", "676", "https://openapi.tuyaeu.com"),
    Country("Trinidad and Tobago", "1-868", "https://openapi.tuyaeu.com"),
    Country("Tunisia", "216", "https://openapi.tuyaeu.com"),
    Country("Turkey", "90", "https://openapi.tuyaeu.com"),
    Country("Turkmenistan", "993", "https://openapi.tuyaeu.com"),
    Country("Turks and Caicos Islands", "1-649", "https://openapi.tuyaeu.com"),
    Country("Tuvalu", "688", "https://openapi.tuyaeu.com"),
    Country("U.S. Virgin Islands", "1-340", "https://openapi.tuyaeu.com"),
    Country("Uganda", "256", "https://openapi.tuyaeu.com"),
    Country("Ukraine", "380", "https://openapi.tuyaeu.com"),
    Country("United Arab Emirates", "971", "https://openapi.tuyaeu.com"),
    Country("United Kingdom", "44", "https://openapi.tuyaeu.com"),
    Country("United States", "1", "https://openapi.tuyaus.com"),
    Country("Uruguay", "598", "https://openapi.tuyaus.com"),
    Country("Uzbekistan", "998", "https://openapi.tuyaeu.com"),
    Country("Vanuatu", "678", "https://openapi.tuyaus.com"),
    Country("Vatican", "379", "https://openapi.tuyaeu.com"),
    Country("Venezuela", "58", "https://openapi.tuyaus.com"),
    Country("Vietnam", "84", "https://openapi.tuyaus.com"),
    Country("Wallis and Futuna", "681", "https://openapi.tuyaeu.com"),
    Country("Western Sahara", "212", "https://openapi.tuyaeu.com"),
    Country("Yemen", "967", "https://openapi.tuyaeu.com"),
    Country("Zambia", "260", "https://openapi.tuyaeu.com"),
    Country("Zimbabwe", "263", "https://openapi.tuyaeu.com"),
]

_COUNTRIES: Dict[str, Country] = {c.name: c for c in _COUNTRY_LIST}


def resolve_country(name: str | None) -> Optional[Country]:
    """Return the datacenter definition for a country name if known."""
    if not name:
        return None
    return _COUNTRIES.get(name)


def country_names() -> list[str]:
    return [c.name for c in _COUNTRY_LIST]
