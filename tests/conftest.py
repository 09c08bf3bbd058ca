"""
Pytest configuration and fixtures for compendium-keeper tests.
"""

import sys
from pathlib import Path
import pytest

# Add src directory to Python path to allow importing compendium_keeper
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))


SAMPLE_XML = """<?xml version="1.0" encoding="UTF-8"?>
<compendium version="5">
  <item>
    <name>Longsword</name>
    <type>M</type>
    <weight>3</weight>
    <value>15</value>
    <dmg1>1d8</dmg1>
    <dmg2>1d10</dmg2>
    <dmgType>S</dmgType>
    <property>V,M</property>
    <text>A versatile martial blade.</text>
    <rarity>common</rarity>
  </item>
  <item>
    <name>Dagger</name>
    <type>M</type>
    <dmg1>1d4</dmg1>
    <dmgType>P</dmgType>
    <text>A simple blade.</text>
  </item>
  <spell>
    <name>Fire Bolt</name>
    <level>0</level>
    <school>EV</school>
    <time>1 action</time>
    <range>120 feet</range>
    <components>V, S</components>
    <duration>Instantaneous</duration>
    <classes>Sorcerer, Wizard</classes>
    <text>You hurl a mote of fire.</text>
  </spell>
  <monster>
    <name>Wolf</name>
    <size>M</size>
    <type>beast</type>
    <alignment>unaligned</alignment>
    <ac>13 (natural armor)</ac>
    <hp>11 (2d8+2)</hp>
    <speed>40 ft.</speed>
    <str>12</str>
    <dex>15</dex>
    <con>12</con>
    <int>3</int>
    <wis>12</wis>
    <cha>6</cha>
    <skill>Perception +3, Stealth +4</skill>
    <senses>passive Perception 13</senses>
    <passive>13</passive>
    <cr>1/4</cr>
    <trait>
      <name>Keen Hearing and Smell</name>
      <text>The wolf has advantage on Wisdom (Perception) checks that rely on hearing or smell.</text>
    </trait>
    <action>
      <name>Bite</name>
      <text>Melee Weapon Attack: +4 to hit, reach 5 ft., one target.</text>
      <attack>Bite|+4|2d4+2</attack>
    </action>
  </monster>
  <class>
    <name>Fighter</name>
    <hd>10</hd>
    <proficiency>Strength, Constitution</proficiency>
    <autolevel level="1">
      <feature>
        <name>Second Wind</name>
        <text>Regain hit points as a bonus action.</text>
      </feature>
      <feature optional="YES">
        <name>Fighting Style: Archery</name>
        <text>+2 to ranged attack rolls.</text>
      </feature>
    </autolevel>
    <autolevel level="2">
      <feature>
        <name>Action Surge</name>
        <text>Take one additional action.</text>
      </feature>
    </autolevel>
  </class>
  <race>
    <name>Dwarf, Hill</name>
    <size>M</size>
    <speed>25</speed>
    <ability>Con 2, Wis 1</ability>
    <trait>
      <name>Darkvision</name>
      <text>You can see in dim light within 60 feet.</text>
    </trait>
    <trait>
      <name>Dwarven Resilience</name>
      <text>Advantage on saving throws against poison.</text>
    </trait>
  </race>
  <feat>
    <name>Alert</name>
    <prerequisite></prerequisite>
    <text>Always on the lookout for danger.</text>
  </feat>
  <background>
    <name>Acolyte</name>
    <proficiency>Insight, Religion</proficiency>
    <trait>
      <name>Shelter of the Faithful</name>
      <text>You command the respect of those who share your faith.</text>
    </trait>
  </background>
</compendium>
"""


@pytest.fixture
def sample_xml() -> str:
    """A small compendium document with one or more entries per category."""
    return SAMPLE_XML
