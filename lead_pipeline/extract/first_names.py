"""Common US first names, used to reject capitalised word pairs that are not people.

Compiled from SSA baby-name popularity lists. Lower-case, one entry per name.
"""

from __future__ import annotations

_NAMES = """
aaliyah aaron abby abdul abe abel abigail abraham abram ada adalberto adam adan addie addison
adela adelaide adele adeline adolfo adolph adrian adriana adrianne adrienne agatha agnes agustin
ahmad ahmed aida aileen aimee ainsley aisha aja al alan alana alba albert alberta alberto alden
alec alejandra alejandro alena alessandra alex alexa alexander alexandra alexandria alexia
alexis alfonso alfred alfreda alfredo ali alice alicia alida alijah alina alisa alisha alison
alissa alix allan allen allie allison allyson alma alonzo alphonso alta althea alton alva alvaro
alvin alyce alyssa amalia amanda amber ambrose amelia amie amir amos amparo amy ana anabel
anastasia anderson andre andrea andreas andres andrew andy angel angela angelica angelina
angelique angelo angie angus anita ann anna annabelle anne annette annie anthony antoine
antoinette anton antonia antonio anya april archer archie ari aria ariana ariel arielle arlene
arlo armando arnold arnulfo aron arron art arthur arturo asa asher ashlee ashley ashlyn ashton
astrid athena aubrey audra audrey august augustine augustus aurelia aurelio aurora austin
autumn ava avery axel ayden bailey barbara barney barrett barry bart barton basil beatrice
beatriz beau becky belinda bella ben benedict benita benjamin bennett benny benton bernadette
bernard bernardo bernice bernie berry bert bertha bertram beryl bessie beth bethany betsy
betty beulah beverly bianca bill billie billy blair blaine blake blanca blanche bo bobbi bobbie
bobby bonita bonnie booker boris boyd brad braden bradford bradley bradly brady braxton brenda
brendan brendon brenna brent brenton bret brett brian briana brianna brice bridget bridgett
brigitte britney britt brittany brittney brock broderick brody brooke brooklyn brooks bruce
bruno bryan bryanna bryant bryce brynn bryon buck bud buddy burt burton byron caden caitlin
caitlyn cale caleb callie calvin cameron camila camille candace candice candy cara carey carissa
carl carla carlene carlo carlos carlton carly carmela carmelo carmen carol carole carolina
caroline carolyn carrie carroll carson carter cary casey cassandra cassidy cassie catalina
catherine cathleen cathy cecelia cecil cecile cecilia cedric celeste celia celina cesar chad
chance chandler chandra charity charlene charles charley charlie charlotte chase chasity chauncey
chelsea chelsey cheri cherie cherry cheryl chester cheyenne chloe chris christa christi christian
christie christina christine christopher christy chrystal chuck cindy clair claire clara clare
clarence clarissa clark claude claudette claudia claudio clay clayton clement cleo cliff clifford
clifton clint clinton clyde cody colby cole coleen colette colin colleen collin colt colton
connie connor conrad constance consuelo cora corey cori corina corinne cornelius cornell cory
courtney craig cristina cristopher cruz crystal curt curtis cynthia cyril cyrus daisy dakota
dale dallas dalton damian damien damion damon dan dana dane danica daniel daniela danielle
danika danny dante daphne darcy darin dario darius darla darlene darnell darrel darrell darren
darrin darryl daryl dave david davis dawn dean deana deandre deann deanna deanne debbie debora
deborah debra declan dee deena deidre deirdre del delbert delia della delores delphine demetrius
dena denis denise dennis denny derek derick derrick desiree desmond destiny devin devon dewayne
dewey dexter diana diane diann dianna dianne diego dillon dina dinah dino dion dionne dixie
dolores domingo dominic dominick dominique don donald donna donnell donnie donovan dora doreen
doris dorothy dorthy doug douglas doyle drake drew duane dudley duncan dustin dusty dwayne
dwight dylan earl earlene earnest ebony ed eddie edgar edison edith edmond edmund edna eduardo
edward edwin edwina effie eileen elaine elbert eldon eleanor elena eli elias elijah elinor elisa
elisabeth elise eliza elizabeth ella ellen ellie elliot elliott ellis elma elmer elnora eloise
elsa elsie elton elva elvin elvira elvis elwood emanuel emerson emery emil emilia emilio emily
emma emmanuel emmett enrique eric erica erick erik erika erin ernest ernestine ernesto ernie
errol erwin esmeralda esperanza essie estela estella estelle ester esther ethan ethel etta
eugene eugenia eula eunice eva evan evangeline eve evelyn everett ezekiel ezra fabian faith
fannie fatima fay faye federico felicia felipe felix fern fernando fidel fiona flora florence
floyd forrest foster frances francesca francine francis francisco frank frankie franklin fred
freda freddie freddy frederick fredrick gabriel gabriela gabrielle gail gale galen garland
garrett garry garth gary gavin gayle gena gene genevieve geneva geoffrey george georgia
georgina gerald geraldine gerard gerardo gertrude gideon gil gilbert gilberto gina ginger
giovanni gladys glen glenda glenn gloria goldie gordon grace gracie grady graham grant greg
gregg gregory greta gretchen griffin guadalupe guillermo gus gustavo guy gwen gwendolyn hailey
hal haley hallie hank hannah hans harlan harley harold harriet harrison harry harvey hattie
hayden hazel heath heather hector heidi helen helena helene henrietta henry herbert heriberto
herman hilary hilda hillary hiram holly homer hope horace howard hubert hudson hugh hugo hunter
ian ida ignacio ila ilene imelda imogene ines inez ingrid ira irene iris irma irvin irving isaac
isabel isabella isabelle isaiah isiah isidro ismael israel issac ivan ivy jacalyn jace jack
jackie jacklyn jackson jaclyn jacob jacqueline jacquelyn jade jaden jaime jake jamal james jamie
jan jana jane janelle janet janice janie janine janis jared jarrett jarvis jasmine jason jasper
javier jay jayden jayne jean jeanette jeanie jeanine jeanne jeannette jeannie jed jeff jefferson
jeffery jeffrey jenifer jenna jennie jennifer jenny jerald jeremiah jeremy jermaine jerome jerri
jerry jess jesse jessica jessie jesus jill jillian jim jimmie jimmy jo joan joann joanna joanne
jocelyn jodi jodie jody joe joel joey johanna john johnathan johnnie johnny jon jonah jonas
jonathan jordan jorge jose josef joseph josephine josh joshua josiah josie joy joyce juan juana
juanita jude judith judy jules julia julian juliana julie juliet julio julius june justin
justina justine kaitlyn kara karen kari karin karina karl karla kasey kate katelyn katherine
kathleen kathrine kathryn kathy katie katrina kay kayla kaylee keegan keisha keith kelley kelli
kellie kelly kelsey ken kendall kendra kenneth kenny kent kermit kerri kerry kevin khalil kim
kimberly king kirk kirsten kitty kris krista kristen kristi kristie kristin kristina kristine
kristopher kristy krystal kurt kyle kylie lacey lamar lance landon lane lara larry latisha
latoya laura laurel lauren laurence laurie lavern laverne lawrence lea leah leann leanne lee
leigh leila lela leland lena leo leon leona leonard leonardo leroy les lesley leslie lester
leticia levi lewis lila lilian liliana lillian lilly lily lincoln linda lindsay lindsey lionel
lisa liz liza lizzie llewellyn lloyd logan lois lola lonnie lora loren lorena lorene lorenzo
loretta lori lorna lorraine lottie lou louie louis louisa louise lucas lucia lucille lucinda
lucy luis luke lula luna luther lydia lyle lynda lynette lynn lynne mabel mack mackenzie maddox
madeleine madeline madelyn madison mae maggie malcolm malik mallory mamie mandy manuel mara
marc marcel marcella marci marcia marco marcos marcus margaret margarita margie margo maria
mariah marian mariana marianne maribel marie marilyn marina mario marion marisa marissa marjorie
mark marla marlene marlon marsha marshall marta martha martin marty marvin mary maryann mason
mathew matilda matt matthew mattie maude maura maureen maurice mauricio max maxine maxwell may
maya megan meghan melanie melba melinda melissa melody melvin mercedes meredith merle mia micah
michael michaela micheal michele michelle miguel mike mikayla milagros mildred miles millard
millie milton mindy minnie miranda miriam misty mitchell molly mona monica monique monte
morgan morris moses muriel myles myra myrna myron myrtle nadia nadine nancy naomi natalia
natalie natasha nathan nathaniel neal ned neil nell nellie nelson nettie neva nicholas nichole
nick nicki nickolas nicolas nicole nikki nina noah noel noelle nola nolan nona nora norma
norman olga olive oliver olivia ollie omar opal ophelia ora orlando orville oscar otis otto
owen pablo paige pam pamela pat patrice patricia patrick patsy patti patty paul paula paulette
pauline pearl pedro peggy penelope penny percy perry pete peter petra phil philip phillip
phoebe phyllis pierce polly preston priscilla quentin quincy quinn rachael rachel rafael
raleigh ralph ramiro ramon ramona randal randall randi randolph randy raphael raquel raul ray
raymond reba rebecca rebekah reed reggie regina reginald reid rene renee reuben rex reyna
rhonda ricardo rich richard rick ricky riley rita rob robbie robert roberta roberto robin robyn
rocco rochelle rocky rod roderick rodney rodolfo rodrigo rogelio roger roland rolando roman
ron ronald ronda ronnie rory rosa rosalie rosalind rosario roscoe rose roseann rosemarie
rosemary rosie ross rowan roxanne roy ruben ruby rudolph rudy rufus russ russell rusty ruth
ryan sabrina sadie sal sally salvador sam samantha sammy samuel sandra sandy santiago santos
sara sarah sasha saul savannah scott sean sebastian selena selma serena sergio seth seymour
shane shannon shari sharon shaun shauna shawn shawna sheena sheila shelby sheldon shelia
shelley shelly sheri sherman sherri sherry sheryl shirley sidney sierra silas silvia simon
simone sofia solomon sondra sonia sonja sonya sophia sophie spencer stacey staci stacie stacy
stan stanley stefan stefanie stella stephan stephanie stephen sterling steve steven stewart
stuart sue summer susan susanna susie suzanne sybil sydney sylvester sylvia tabitha tamara
tameka tami tamika tammy tania tanner tanya tara tasha taylor ted teddy teresa teri terrance
terrell terrence terri terry thad thaddeus thelma theo theodore theresa thomas tia tiffany tim
timmy timothy tina tobias toby todd tom tomas tommie tommy toni tony tonya tracey traci tracy
travis trent trenton trevor tricia trina trisha tristan troy trudy tucker ty tyler tyrone
tyson ulysses ursula valentina valentine valerie van vance vanessa velma vera vern verna
vernon veronica vicki vickie vicky victor victoria vince vincent viola violet virgil virginia
vivian wade walker wallace walter wanda ward warren wayne wendell wendy wesley weston whitney
wilbur wilfred wilhelmina will willa willard william willie willis wilma wilson winifred
winston wyatt xavier yesenia yolanda yvette yvonne zachariah zachary zachery zane zelda zoe
"""

FIRST_NAMES: frozenset[str] = frozenset(_NAMES.split())
